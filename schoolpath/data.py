"""Dataset loading from local files or URLs, with disk caching."""

import hashlib
import json
import os
import time
from typing import Optional

import requests

from .address import AddressBook
from .config import CONFIG
from .graph import JunctionGraph
from .logger import Logger
from .models import School


class DatasetError(RuntimeError):
    """A dataset could not be read, downloaded or understood"""


class DatasetFetcher:
    """Fetch JSON datasets (junctions, addresses, schools) from a path or URL"""

    CACHE_DIR = CONFIG["dataset_cache_dir"]
    CACHE_MAX_AGE = CONFIG["dataset_cache_max_age"]

    @classmethod
    def _cache_path(cls, url: str) -> str:
        """Generate a cache file path for the given URL."""
        h = hashlib.md5(url.encode()).hexdigest()[:12]
        return os.path.join(cls.CACHE_DIR, f"dataset_{h}.json")

    @classmethod
    def _read_cache(cls, url: str, logger: Optional[Logger] = None):
        """Return cached data for the URL if it is fresh, otherwise None"""
        path = cls._cache_path(url)
        try:
            age = time.time() - os.path.getmtime(path)
            if age > cls.CACHE_MAX_AGE:
                return None
            with open(path) as f:
                cached = json.load(f)
            if cached.get("_cache_meta", {}).get("url") != url:
                return None
            data = cached["data"]
        except (json.JSONDecodeError, AttributeError, KeyError, OSError):
            return None
        if logger:
            logger.log("Using cached dataset", {"url": url, "age_hours": round(age / 3600, 1)})
        return data

    @classmethod
    def _write_cache(cls, url: str, data, logger: Optional[Logger] = None):
        os.makedirs(cls.CACHE_DIR, exist_ok=True)
        path = cls._cache_path(url)
        with open(path, "w") as f:
            json.dump({"_cache_meta": {"url": url, "fetched_at": time.time()}, "data": data}, f)
        if logger:
            logger.log("Cached dataset", {"url": url, "path": path})

    @classmethod
    def fetch_json(cls, source: str, logger: Optional[Logger] = None):
        """Load JSON from a local file, or download it from an http(s) URL.

        Downloads are cached on disk and reused until they are older than
        CACHE_MAX_AGE.
        """
        if source.startswith(("http://", "https://")):
            return cls._download(source, logger)
        try:
            with open(source) as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DatasetError(f"Cannot read dataset {source}: {e}") from e

    @classmethod
    def _download(cls, url: str, logger: Optional[Logger] = None):
        cached = cls._read_cache(url, logger)
        if cached is not None:
            return cached

        if logger:
            logger.log("Fetching dataset", {"url": url})
        try:
            response = requests.get(url, timeout=CONFIG["dataset_fetch_timeout"])
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise DatasetError(f"Cannot download dataset {url}: {e}") from e
        except ValueError as e:
            raise DatasetError(f"Dataset {url} is not JSON: {e}") from e

        cls._write_cache(url, data, logger)
        return data


def _expect(raw, kind: type, source: str):
    if not isinstance(raw, kind):
        raise DatasetError(f"Dataset {source} should hold a JSON {kind.__name__}")
    return raw


def load_graph(source: str, logger: Optional[Logger] = None) -> JunctionGraph:
    """Load the junction table: {cnn: {"ll": [lat, lon], "streets": [..], "adj": [..]}}"""
    raw = _expect(DatasetFetcher.fetch_json(source, logger), dict, source)
    return JunctionGraph.from_dict(raw, logger=logger)


def load_addresses(source: str, logger: Optional[Logger] = None) -> AddressBook:
    """Load the address table: {street: {number: [lat, lon]}}"""
    raw = _expect(DatasetFetcher.fetch_json(source, logger), dict, source)
    book = AddressBook.from_dict(raw, logger=logger)
    if logger:
        logger.log("Loaded addresses", {"streets": len(book.streets), "addresses": len(book)})
    return book


def load_schools(source: str, logger: Optional[Logger] = None) -> list[School]:
    """Load the school list: [{"name": .., "types": [..], "address": ..}]"""
    raw = _expect(DatasetFetcher.fetch_json(source, logger), list, source)
    schools = []
    for record in raw:
        if not isinstance(record, dict) or "address" not in record or "name" not in record:
            if logger:
                logger.warn("School data missing", {"record": record})
            continue
        schools.append(School.from_dict(record))
    return schools
