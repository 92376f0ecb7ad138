"""Generate sample call-record extract files for testing the loader.

Creates ``cdr`` (call detail) and ``cmr`` (call management) extract files,
without file extensions, in the scan directory. Each file carries the two
header lines the loader expects: column names and source column types.

Usage:
    python scripts/generate_sample_extracts.py
    python scripts/generate_sample_extracts.py --output-dir /data/extracts --date 20240201
"""

import argparse
import os
import random
import uuid
from datetime import datetime, timedelta

CDR_COLUMNS = [
    ("pkid", "UNIQUEIDENTIFIER"),
    ("globalCallID_callId", "INT"),
    ("dateTimeOrigination", "INT"),
    ("callingPartyNumber", "VARCHAR(50)"),
    ("originalCalledPartyNumber", "VARCHAR(50)"),
    ("duration", "INT"),
]

CMR_COLUMNS = [
    ("pkid", "UNIQUEIDENTIFIER"),
    ("globalCallID_callId", "INT"),
    ("directoryNum", "VARCHAR(50)"),
    ("numberPacketsSent", "INT"),
    ("numberPacketsLost", "INT"),
    ("jitter", "INT"),
]


def _header(columns) -> str:
    names = ",".join(f'"{name}"' for name, _ in columns)
    types = ",".join(type_name for _, type_name in columns)
    return f"{names}\n{types}\n"


def _phone_number() -> str:
    return f"555{random.randint(1000, 9999)}"


def generate_cdr_file(output_dir: str, date_str: str, count: int = 50) -> str:
    """Generate a sample call detail record extract.

    Args:
        output_dir: Target directory.
        date_str: Date string for the filename (YYYYMMDD).
        count: Number of call records.

    Returns:
        Path to the generated file.
    """
    base_dt = datetime.strptime(date_str, "%Y%m%d")
    lines = []
    for i in range(1, count + 1):
        origination = base_dt + timedelta(seconds=random.randint(0, 86399))
        # Some calls are unanswered and have no called party
        called = _phone_number() if random.random() > 0.1 else ""
        lines.append(",".join([
            f'"{uuid.uuid4()}"',
            str(3000000000 + i),
            str(int(origination.timestamp())),
            f'"{_phone_number()}"',
            f'"{called}"' if called else "",
            str(random.randint(0, 3600)),
        ]))

    file_path = os.path.join(output_dir, f"cdr_StandAloneCluster_01_{date_str}0000_1")
    with open(file_path, "w", newline="") as f:
        f.write(_header(CDR_COLUMNS))
        f.write("\n".join(lines) + "\n")

    print(f"Generated {count} call detail records -> {file_path}")
    return file_path


def generate_cmr_file(output_dir: str, date_str: str, count: int = 50) -> str:
    """Generate a sample call management record extract.

    Args:
        output_dir: Target directory.
        date_str: Date string for the filename (YYYYMMDD).
        count: Number of call management records.

    Returns:
        Path to the generated file.
    """
    lines = []
    for i in range(1, count + 1):
        sent = random.randint(100, 100000)
        lines.append(",".join([
            f'"{uuid.uuid4()}"',
            str(3000000000 + i),
            f'"{_phone_number()}"',
            str(sent),
            str(random.randint(0, sent // 100)),
            str(random.randint(0, 40)),
        ]))

    file_path = os.path.join(output_dir, f"cmr_StandAloneCluster_01_{date_str}0000_1")
    with open(file_path, "w", newline="") as f:
        f.write(_header(CMR_COLUMNS))
        f.write("\n".join(lines) + "\n")

    print(f"Generated {count} call management records -> {file_path}")
    return file_path


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Generate sample extract files for the CDR loader"
    )
    parser.add_argument(
        "--output-dir",
        default=os.path.join(os.path.dirname(__file__), "..", "data", "extracts"),
        help="Output directory for generated files (default: data/extracts/)",
    )
    parser.add_argument(
        "--date",
        default="20240101",
        help="Date string for filenames in YYYYMMDD format (default: 20240101)",
    )
    parser.add_argument(
        "--cdr", type=int, default=50, help="Number of call detail records"
    )
    parser.add_argument(
        "--cmr", type=int, default=50, help="Number of call management records"
    )
    args = parser.parse_args(argv)

    output_dir = os.path.abspath(args.output_dir)
    os.makedirs(output_dir, exist_ok=True)

    print(f"Generating sample extracts in {output_dir}")
    generate_cdr_file(output_dir, args.date, args.cdr)
    generate_cmr_file(output_dir, args.date, args.cmr)
    print("Sample extract generation complete!")


if __name__ == "__main__":
    main()
