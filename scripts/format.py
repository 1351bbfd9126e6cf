"""Format script for the operations assistant back end."""

import subprocess
import sys


def _paths() -> list[str]:
    return ["opsassist/", "tests/", "scripts/"]


def main():
    """Run ruff format and targeted checks on the codebase."""
    try:
        targets = _paths()

        subprocess.run(["ruff", "format", *targets], check=True)

        # Fast whitespace cleanups (preview + unsafe for whitespace-only)
        subprocess.run(
            [
                "ruff",
                "check",
                "--preview",
                "--fix",
                "--unsafe-fixes",
                "--select",
                "W291,W293,E3",
                *targets,
            ],
            check=True,
        )

        subprocess.run(["ruff", "check", "--fix", "--ignore", "E501", *targets], check=True)

    except subprocess.CalledProcessError:
        sys.exit(1)


if __name__ == "__main__":
    main()
