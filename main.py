import argparse
import sys
from dataclasses import replace
from pathlib import Path

from tqdm import tqdm

# Add project root to path for robust execution
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from eword.charsets import is_ascii
from eword.config import DEFAULT_CONFIG, load_config
from eword.encoder import encode_field
from eword.io_utils import load_fields, save_fields
from eword.validation import validate

def main():
    """
    Main command-line interface for the RFC 2047 header encoder.

    This script encodes a batch of header fields. It performs the following
    steps:
    1.  Loads the configuration file, if one is given; otherwise the built-in
        tables are used.
    2.  Loads the raw fields from the input file (JSON or a header block).
    3.  Encodes every field containing non-ASCII text, passing 7-bit fields
        through unchanged.
    4.  Validates the encoded output against the line-length and
        encoded-word rules and reports any issues.
    5.  Writes the encoded fields as a header block, or as JSON with `--json`.
    """
    parser = argparse.ArgumentParser(
        description="Encode non-ASCII header fields into RFC 2047 encoded-words.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Path to the input header block or fields JSON file."
    )
    parser.add_argument(
        "--output",
        required=True,
        help="Path to write the encoded header fields."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a configuration YAML file. The built-in tables are used when omitted."
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on text that no transfer encoding can carry instead of emitting it raw."
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Write the output as a JSON document with a 'fields' list."
    )
    args = parser.parse_args()

    try:
        # 1. Load configuration
        if args.config:
            print(f"Loading configuration from {args.config}...")
            cfg = load_config(args.config)
        else:
            cfg = DEFAULT_CONFIG
        if args.strict:
            cfg = replace(cfg, strict=True)

        # 2. Load input data
        print(f"Loading fields from {args.input}...")
        fields = load_fields(args.input)

        # 3. Encode
        print(f"Encoding {len(fields)} fields...")
        encoded = [
            raw if is_ascii(raw) else encode_field(raw, cfg)
            for raw in tqdm(fields, desc="Encoding", unit="field")
        ]

        # 4. Validate
        report = validate("\n".join(encoded), cfg)
        if report["issue_count"]:
            print(f"Validation found {report['issue_count']} issue(s):")
            for issue in report["issues"]:
                print(f"  - {issue['message']}")
        else:
            print("Validation passed with no issues.")

        # 5. Write to output file
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        if args.json:
            save_fields(str(output_path), encoded)
        else:
            with open(output_path, "w", encoding="utf-8") as f:
                f.write("\n".join(encoded) + "\n")

        print(f"\nSuccessfully wrote encoded fields to {args.output}")

    except (FileNotFoundError, ValueError, TypeError, KeyError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":
    main()
