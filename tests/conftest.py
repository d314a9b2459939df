import gzip
import random
import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from pathlib import Path

import pytest

BASE_URL = "https://www.example.com"
NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}
LETTERS = "////abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


@pytest.fixture
def now():
    return datetime(2024, 5, 17, 8, 30, tzinfo=UTC)


@pytest.fixture
def build_routes():
    rng = random.Random(1234)

    def build(n, length, shortest):
        return ["".join(rng.choice(LETTERS) for _ in range(rng.randrange(length) + shortest)) for _ in range(n)]

    return build


@pytest.fixture
def read_xml():
    def read(path):
        data = Path(path).read_bytes()
        if str(path).endswith(".gz"):
            data = gzip.decompress(data)
        return ET.fromstring(data)

    return read


@pytest.fixture
def read_locs(read_xml):
    def read(path):
        root = read_xml(path)
        return [node.text for node in root.findall("./*/sm:loc", NS)]

    return read
