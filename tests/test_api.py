"""Tests for the REST API."""

import pytest
from fastapi.testclient import TestClient

from config.settings import settings
from shardscope.api.main import app
from shardscope.keygen import MAX_GENERATE_COUNT, PRESETS
from shardscope.partitioning import MAX_HASH_KEY, partition_key_to_partition_index


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_root_overview(client):
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["presets"] == PRESETS
    assert body["data"]["limits"]["max_generate_count"] == MAX_GENERATE_COUNT
    assert body["data"]["limits"]["max_partition_count"] == settings.partitioning.max_partition_count


def test_analyze_keys(client):
    response = client.post("/partitions/analyze", json={"keys": ["user-1", "user-2", "user-1"], "partition_count": 8})
    assert response.status_code == 200
    data = response.json()["data"]

    assert data["partition_count"] == 8
    assert data["total_keys"] == 3
    assert [r["partition_key"] for r in data["records"]] == ["user-1", "user-2", "user-1"]
    assert data["records"][0]["partition_index"] == partition_key_to_partition_index("user-1", 8)
    assert sum(data["summary"]["counts"]) == 3


def test_analyze_raw_keys_and_floored_count(client):
    response = client.post("/partitions/analyze", json={
        "raw_keys": "a\r\n b \n\n",
        "partition_count": 4.7,
        "include_records": False,
    })
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["partition_count"] == 4
    assert data["total_keys"] == 2
    assert "records" not in data


def test_analyze_without_keys_has_no_summary(client):
    response = client.post("/partitions/analyze", json={"keys": [], "partition_count": 4})
    assert response.status_code == 200
    assert response.json()["data"]["summary"] is None


@pytest.mark.parametrize("count", [0, -3, 0.5])
def test_analyze_rejects_invalid_partition_count(client, count):
    response = client.post("/partitions/analyze", json={"keys": ["a"], "partition_count": count})
    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "InvalidPartitionCount"


def test_hash_key_ranges(client):
    response = client.get("/partitions/ranges", params={"partition_count": 4})
    assert response.status_code == 200
    ranges = response.json()["data"]["ranges"]
    assert len(ranges) == 4
    assert ranges[0]["starting_hash_key"] == "0"
    assert ranges[-1]["ending_hash_key"] == str(MAX_HASH_KEY)


def test_hash_key_ranges_limit(client):
    response = client.get("/partitions/ranges", params={"partition_count": 10 ** 6})
    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "TooManyRanges"


def test_generate_keys(client):
    response = client.post("/keys/generate", json={"pattern": "[A-C]{2}", "count": 10})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["count"] == 10
    assert all(len(k) == 2 and set(k) <= set("ABC") for k in data["keys"])


def test_generate_keys_from_preset(client):
    response = client.post("/keys/generate", json={"preset": "vin", "count": 3})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["pattern"] == PRESETS["vin"]
    assert all(len(k) == 17 for k in data["keys"])


def test_generate_keys_clamps_count(client):
    response = client.post("/keys/generate", json={"pattern": "a", "count": -5})
    assert response.json()["data"]["keys"] == []


def test_generate_keys_unknown_preset(client):
    response = client.post("/keys/generate", json={"preset": "nope", "count": 3})
    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "UnknownPreset"


def test_generate_keys_invalid_pattern(client):
    response = client.post("/keys/generate", json={"pattern": "(a|b)", "count": 3})
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["error_code"] == "UnsupportedSyntax"


def test_simulate(client):
    response = client.post("/keys/simulate", json={"pattern": "[a-z]{12}", "count": 400, "partition_count": 4})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["pattern"] == "[a-z]{12}"
    assert data["total_keys"] == 400
    assert sum(data["summary"]["counts"]) == 400
    assert "records" not in data


def test_health_counts_rejected_requests(client):
    client.post("/keys/generate", json={"pattern": "[z-a]", "count": 1})
    response = client.get("/monitoring/health")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["overall"] == "healthy"
    assert data["rejected_total"] >= 1
    assert data["requests_total"] >= 2


def test_analyze_rejects_too_many_partitions(client):
    response = client.post("/partitions/analyze", json={"keys": ["a"], "partition_count": 1e15})
    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "TooManyPartitions"


def test_simulate_rejects_too_many_partitions(client):
    response = client.post("/keys/simulate", json={"pattern": "a", "count": 1, "partition_count": 10 ** 15})
    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "TooManyPartitions"


def test_analyze_accepts_partition_count_at_limit(client):
    limit = client.get("/").json()["data"]["limits"]["max_partition_count"]
    response = client.post("/partitions/analyze", json={"keys": ["a"], "partition_count": limit, "include_records": False})
    assert response.status_code == 200
    assert len(response.json()["data"]["summary"]["counts"]) == limit
