#!/usr/bin/env python3
"""Generate signed access tokens for manual API testing.

Run with:
    python scripts/generate_test_token.py 1 --role service_center
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.deps import issue_smoke_token
from src.core.auth import Role


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_id", type=int, help="Numeric account id used as the token subject")
    parser.add_argument(
        "--role", choices=[role.value for role in Role], default=Role.CAR_OWNER.value
    )
    parser.add_argument("--email", default=None)
    args = parser.parse_args()

    token = issue_smoke_token(args.user_id, role=Role(args.role), email=args.email)
    print(f"{args.role} token for user {args.user_id}:\n{token}")


if __name__ == "__main__":
    main()
