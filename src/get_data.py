"""
Download the NOAA storm database extract and optionally decompress it.
"""
import os
import bz2
import gzip
import shutil
import sys
from urllib.parse import unquote

import requests

STORM_DATA_URL = "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2FStormData.csv.bz2"
RAW_DIR = "data/raw"
UNZIPPED_DIR = "data/unzipped"
CHUNK_SIZE = 8192
TIMEOUT = 60


def download_storm_data(url=STORM_DATA_URL, dest_dir=RAW_DIR, force=False):
    """Stream the compressed storm data file to dest_dir and return its path.

    An existing file is reused unless force is set.
    """
    os.makedirs(dest_dir, exist_ok=True)
    # the URL path quotes its slashes: repdata%2Fdata%2FStormData.csv.bz2
    filename = unquote(url).rsplit("/", 1)[-1]
    dest = os.path.join(dest_dir, filename)

    if os.path.exists(dest) and not force:
        print(f"Using existing {dest}")
        return dest

    print(f"Downloading {filename} ...")
    # written to a .part file first so an interrupted download is never reused
    part = dest + ".part"
    try:
        with requests.get(url, stream=True, timeout=TIMEOUT) as r:
            if r.status_code != 200:
                raise ValueError(f"Failed to download {filename} (status {r.status_code})")

            with open(part, "wb") as f:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    f.write(chunk)
        os.replace(part, dest)
    finally:
        if os.path.exists(part):
            os.remove(part)
    print(f"Saved to {dest}")
    return dest


def decompress_storm_data(path, dest_dir=UNZIPPED_DIR):
    """Expand a .bz2 or .gz file into dest_dir and return the new path."""
    openers = {".bz2": bz2.open, ".gz": gzip.open}
    base, ext = os.path.splitext(os.path.basename(path))
    if ext not in openers:
        raise ValueError(f"Don't know how to decompress {path}")

    os.makedirs(dest_dir, exist_ok=True)
    unzipped_dest = os.path.join(dest_dir, base)

    print(f"Unzipping {os.path.basename(path)} ...")
    with openers[ext](path, "rb") as f_in:
        with open(unzipped_dest, "wb") as f_out:
            shutil.copyfileobj(f_in, f_out)
    print(f"Extracted to {unzipped_dest}")
    return unzipped_dest


if __name__ == '__main__':
    path = download_storm_data(force='--force' in sys.argv)
    if '--unzip' in sys.argv:
        decompress_storm_data(path)
