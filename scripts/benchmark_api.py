from __future__ import annotations

import argparse
import io
import time

import requests
from PIL import Image, ImageDraw


def make_image(size: int) -> bytes:
    img = Image.new('RGB', (size, size), 'white')
    draw = ImageDraw.Draw(img)
    margin = size // 6
    draw.ellipse((margin, margin, size - margin, size - margin), fill='navy')
    out = io.BytesIO()
    img.save(out, format='PNG')
    return out.getvalue()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument('--url', default='http://127.0.0.1:8000')
    parser.add_argument('--count', type=int, default=10)
    parser.add_argument('--image-size', type=int, default=256)
    parser.add_argument('--tolerance', default='10')
    parser.add_argument('--favicon', action='store_true')
    args = parser.parse_args()

    image = make_image(args.image_size)
    endpoint = 'favicons' if args.favicon else 'remove-white-bg'
    started = time.time()

    for _ in range(args.count):
        resp = requests.post(
            f"{args.url}/api/{endpoint}",
            files={'file': ('bench.png', image, 'image/png')},
            data={'tolerance': args.tolerance},
            timeout=30,
        )
        resp.raise_for_status()

    elapsed = time.time() - started
    print({'processed': args.count, 'elapsed_sec': round(elapsed, 2), 'rps': round(args.count / elapsed, 2)})


if __name__ == '__main__':
    main()
