import copy
from pathlib import Path

import pytest

from hubfabric.config.loader import parse_config
from hubfabric.config.schema import FabricConfig
from hubfabric.utils.yaml import dump_yaml

REGION = "us-east-1"

SCENARIO = {
    "name": "hybrid",
    "onprem_public_ip": "203.0.113.10",
    "asns": {"hub": 64512, "customer": 65000},
    "regions": {
        REGION: {
            "development": "10.0.0.0/24",
            "production": "10.0.1.0/24",
            "onprem": "10.0.2.0/24",
            "mask": 26,
        }
    },
}


@pytest.fixture
def raw_config() -> dict:
    return copy.deepcopy(SCENARIO)


@pytest.fixture
def config(raw_config: dict) -> FabricConfig:
    return parse_config(raw_config, REGION)


@pytest.fixture
def config_file(tmp_path: Path, raw_config: dict) -> Path:
    path = tmp_path / "hybrid.yml"
    dump_yaml(raw_config, path)
    return path
