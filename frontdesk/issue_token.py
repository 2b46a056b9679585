import sys

from frontdesk.auth import jwt_handler
from frontdesk.core import config


def main(argv: list[str]) -> int:
    if not argv:
        print("usage: python -m frontdesk.issue_token <operator> [role]", file=sys.stderr)
        return 2

    operator = argv[0]
    role = argv[1] if len(argv) > 1 else config.DESK_ROLE
    print(jwt_handler.create_access_token(subject=operator, role=role))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
