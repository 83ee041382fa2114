#!/usr/bin/env python3
"""
Defect Miner - build method-level defect datasets.

Usage:
    python mine_dataset.py                                   # default projects
    python mine_dataset.py --projects SYNCOPE=https://github.com/apache/syncope.git
    python mine_dataset.py --diagnose --output-dir datasets
"""

import argparse
import logging
from pathlib import Path

from defect_miner.config import CLONE_DIR, DEFAULT_PROJECTS
from defect_miner.diagnostics import diagnose_dataset
from defect_miner.extraction import mine_project, write_dataset


def parse_projects(values: list[str]) -> dict:
    """KEY=URL pairs to a {key: url} mapping"""
    projects = {}
    for value in values:
        key, sep, url = value.partition('=')
        if not sep or not key or not url:
            raise argparse.ArgumentTypeError(f"Expected KEY=URL, got {value!r}")
        projects[key.upper()] = url
    return projects


def main(argv=None):
    parser = argparse.ArgumentParser(description='Defect Miner - method-level defect datasets')
    parser.add_argument('--projects', nargs='+', metavar='KEY=URL',
                        help='Jira project keys and git remotes to mine')
    parser.add_argument('--output-dir', default='.',
                        help='Directory for the <KEY>.csv datasets')
    parser.add_argument('--clone-dir', default=CLONE_DIR,
                        help='Directory holding the local clones')
    parser.add_argument('--diagnose', action='store_true',
                        help='Print a label-quality diagnostic per project')
    parser.add_argument('--verbose', action='store_true',
                        help='Debug logging')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    projects = parse_projects(args.projects) if args.projects else DEFAULT_PROJECTS
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print("="*60)
    print("DEFECT MINER")
    print("="*60)
    print(f"Projects: {', '.join(projects)}")

    for key, url in projects.items():
        report = mine_project(key, url, args.clone_dir)
        write_dataset(report.rows, output_dir / f"{key}.csv")
        if args.diagnose:
            diagnose_dataset(report)

    print("\n" + "="*60)
    print("DONE")
    print("="*60)


if __name__ == "__main__":
    main()
