"""Pytest configuration and shared fixtures."""

import json

import pytest

from misp_match.config import MatchConfig

MISP_URL = "https://misp.example.com/events/restSearch"

SYSCHECK_LOG = "File 'c:\\windows\\system32\\sru\\srudb.dat' added\nMode: scheduled"

_ENV_VARS = (
    "MISP_MATCH_CONFIG",
    "MISP_URL",
    "MISP_AUTHORIZATION",
    "MISP_CONTENT_TYPE",
    "MISP_RETURN_FORMAT",
    "MISP_VERIFY_SSL",
    "MISP_REQUEST_TIMEOUT",
    "MISP_MATCH_LOG_FILE",
    "MISP_MATCH_DEBUG",
)


@pytest.fixture(autouse=True)
def isolated_config_env(monkeypatch, tmp_path):
    """Keep the developer's environment and home config out of tests."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(
        "misp_match.config.DEFAULT_CONFIG_PATH", tmp_path / "missing" / "conf.toml"
    )


@pytest.fixture
def match_config(tmp_path):
    """A config pointing at a fake MISP instance."""
    return MatchConfig(
        url=MISP_URL,
        authorization="test-api-key",
        log_file=str(tmp_path / "active-responses.log"),
    )


@pytest.fixture
def wazuh_alert_line():
    """A Wazuh syscheck alert as delivered on stdin."""
    return json.dumps(
        {
            "rule": {"id": "554", "description": "File added to the system."},
            "agent": {"id": "001", "name": "win-host"},
            "full_log": SYSCHECK_LOG,
        }
    )


@pytest.fixture
def misp_event():
    """Mock MISP event with malware and malware-analysis objects."""
    return {
        "id": "1337",
        "uuid": "5e0b6f2a-1d3c-4a4e-9f8b-0242ac120002",
        "date": "2023-04-12",
        "threat_level_id": "1",
        "info": "Pafish sandbox evasion sample",
        "attribute_count": "7",
        "Object": [
            {
                "name": "file",
                "description": "File object",
                "comment": "",
                "Attribute": [
                    {"type": "filename", "object_relation": "filename", "value": "srudb.dat"},
                ],
            },
            {
                "name": "malware-analysis",
                "description": "Malware analysis report",
                "comment": "sandbox run",
                "Attribute": [
                    {"type": "text", "object_relation": "result", "value": "malicious"},
                    {"type": "text", "object_relation": "analysis_engine", "value": "cuckoo"},
                    {"type": "datetime", "object_relation": "end_time", "value": "2023-04-12T10:00:00"},
                ],
            },
            {
                "name": "malware",
                "description": "Malware object",
                "comment": "",
                "Attribute": [
                    {"type": "text", "object_relation": "name", "value": "pafish"},
                    {"type": "text", "object_relation": "malware_type", "value": "trojan"},
                    {"type": "text", "object_relation": "is_family", "value": "false"},
                    {"type": "text", "object_relation": "architecture_execution_env", "value": "x86"},
                ],
            },
        ],
    }


@pytest.fixture
def search_response(misp_event):
    """Mock MISP restSearch response with one matching event."""
    return {"response": [{"Event": misp_event}]}
