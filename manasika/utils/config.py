"""
Configuration management for the hosted companion, storage and application settings.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class BedrockLLMConfig:
    """Configuration for the Amazon Bedrock chat companion."""
    enabled: bool
    region: str
    model_id: str
    max_tokens: int
    temperature: float
    retry_attempts: int
    retry_delay: float
    timeout: int


@dataclass
class StorageConfig:
    """Configuration for the local blob store."""
    backend: str  # file | memory
    path: str
    seed_samples: bool


@dataclass
class ChatConfig:
    """Configuration for the conversation session."""
    history_limit: int
    context_messages: int


@dataclass
class MCPConfig:
    """Configuration for MCP interface."""
    transport: str
    host: str
    port: int


@dataclass
class AppConfig:
    """Main application configuration."""
    environment: str
    log_level: str
    bedrock_llm: BedrockLLMConfig
    storage: StorageConfig
    chat: ChatConfig
    mcp: MCPConfig


def load_config() -> AppConfig:
    """Load configuration from environment variables with defaults."""
    environment = os.getenv('ENVIRONMENT', 'development')

    # Bedrock configuration
    bedrock_llm_config = BedrockLLMConfig(enabled=_as_bool(os.getenv('BEDROCK_LLM_ENABLED', 'false')),
                                          region=os.getenv('BEDROCK_LLM_AWS_REGION', 'us-east-1'),
                                          model_id=os.getenv('BEDROCK_LLM_MODEL_ID', 'anthropic.claude-3-haiku-20240307-v1:0'),
                                          max_tokens=int(os.getenv('BEDROCK_LLM_MAX_TOKENS', '300')),
                                          temperature=float(os.getenv('BEDROCK_LLM_TEMPERATURE', '0.7')),
                                          retry_attempts=int(os.getenv('BEDROCK_LLM_RETRY_ATTEMPTS', '2')),
                                          retry_delay=float(os.getenv('BEDROCK_LLM_RETRY_DELAY', '1.0')),
                                          timeout=int(os.getenv('BEDROCK_LLM_TIMEOUT', '30')))

    # Storage configuration
    storage_config = StorageConfig(backend=os.getenv('STORAGE_BACKEND', 'file'),
                                   path=os.path.expanduser(os.getenv('STORAGE_PATH', '~/.manasika/storage.json')),
                                   seed_samples=_as_bool(os.getenv('STORAGE_SEED_SAMPLES', 'true')))

    # Chat configuration
    chat_config = ChatConfig(history_limit=int(os.getenv('CHAT_HISTORY_LIMIT', '10')),
                             context_messages=int(os.getenv('CHAT_CONTEXT_MESSAGES', '6')))

    # MCP configuration
    mcp_config = MCPConfig(transport=os.getenv('MCP_TRANSPORT', 'stdio'),
                           host=os.getenv('MCP_HOST', '127.0.0.1'),
                           port=int(os.getenv('MCP_PORT', '8000')))

    return AppConfig(environment=environment,
                     log_level=os.getenv('LOG_LEVEL', 'INFO'),
                     bedrock_llm=bedrock_llm_config,
                     storage=storage_config,
                     chat=chat_config,
                     mcp=mcp_config)


# Global configuration instance
config = load_config()
