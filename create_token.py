"""Print an access token for a point, e.g. for support staff or scripts.

Usage:
    python create_token.py 12 --days 30
"""
import argparse

from recycle_points_api.app.core.security import create_access_token


def main() -> None:
    ap = argparse.ArgumentParser(description="Issue an access token for a point.")
    ap.add_argument("point_id", type=int, help="Identifier of the point")
    ap.add_argument("--days", type=int, default=1, help="Token lifetime in days (default: 1)")
    args = ap.parse_args()
    token = create_access_token(
        {"sub": str(args.point_id), "point_id": args.point_id},
        expires_delta=args.days * 24 * 60 * 60,
    )
    print(token)


if __name__ == "__main__":
    main()
