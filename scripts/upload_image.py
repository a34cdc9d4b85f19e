#!/usr/bin/env python3
"""Compress an image and upload it to a running SupportDesk server.

Usage:
    python scripts/upload_image.py PATH [--user-id ID]

Reads APP_URL from the environment (default http://localhost:3000).
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from supportdesk.client import SupportDeskClient, UploadError
from supportdesk.services.image_service import ImageDecodeError, ImageEncodeError

load_dotenv()


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("path")
    parser.add_argument("--user-id", type=int, default=None)
    args = parser.parse_args()

    app_url = os.environ.get("APP_URL", "http://localhost:3000")

    with SupportDeskClient(app_url, user_id=args.user_id) as client:
        try:
            result = client.compress_and_upload(args.path)
        except (ImageDecodeError, ImageEncodeError) as e:
            print(f"Error: {e}")
            sys.exit(1)
        except UploadError as e:
            print(f"Error: {e.message}")
            sys.exit(1)

    print(f"Uploaded image {result['imageId']}: {result['previewUrl']}")
    print(f"Size: {result['originalSize']} -> {result['compressedSize']} bytes")


if __name__ == "__main__":
    main()
