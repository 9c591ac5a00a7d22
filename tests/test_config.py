from fastmcp import FastMCP

from manasika.app import ManasikaApp
from manasika.mcp_interface import create_server
from manasika.utils.config import load_config
from manasika.utils.health_check import check_health, get_health_status


def test_load_config_defaults(monkeypatch):
    for name in ('BEDROCK_LLM_ENABLED', 'STORAGE_BACKEND', 'CHAT_HISTORY_LIMIT', 'CHAT_CONTEXT_MESSAGES', 'MCP_TRANSPORT'):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config.bedrock_llm.enabled is False
    assert config.storage.backend == 'file'
    assert config.chat.history_limit == 10
    assert config.chat.context_messages == 6
    assert config.mcp.transport == 'stdio'


def test_load_config_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv('BEDROCK_LLM_ENABLED', 'True')
    monkeypatch.setenv('BEDROCK_LLM_MAX_TOKENS', '64')
    monkeypatch.setenv('STORAGE_BACKEND', 'memory')
    monkeypatch.setenv('STORAGE_PATH', str(tmp_path / 'x.json'))
    monkeypatch.setenv('STORAGE_SEED_SAMPLES', 'no')

    config = load_config()

    assert config.bedrock_llm.enabled is True
    assert config.bedrock_llm.max_tokens == 64
    assert config.storage.backend == 'memory'
    assert config.storage.path == str(tmp_path / 'x.json')
    assert config.storage.seed_samples is False


def test_health_with_hosted_disabled(app_config, storage):
    status = get_health_status(app_config, storage)
    assert status['storage']['healthy'] is True
    assert status['bedrock_llm'] == {'healthy': True, 'service': 'Amazon Bedrock LLM', 'enabled': False}
    assert check_health(app_config, storage) is True


def test_create_server(app_config, storage):
    server = create_server(ManasikaApp(app_config, storage=storage))
    assert isinstance(server, FastMCP)
