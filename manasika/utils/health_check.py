"""
Health check utilities for the application.
"""

from typing import Any, Dict, Optional

from .bedrock_llm import BedrockLLM, has_credentials
from .blob_store import BlobStore
from .config import AppConfig
from .logging_config import get_logger

logger = get_logger(__name__)


def get_health_status(config: AppConfig, storage: BlobStore, llm: Optional[BedrockLLM] = None) -> Dict[str, Any]:
    """Get detailed health status of all components.

    Args:
        config: Application configuration
        storage: Blob store in use
        llm: Bedrock client to probe; built from config when hosted replies are enabled and None

    Returns:
        Dictionary with health status of each component
    """
    health_status = {}

    health_status['storage'] = {
        'healthy': storage.health_check(),
        'service': 'Blob store',
        'backend': config.storage.backend,
    }

    # Rule-based replies need nothing, so a disabled hosted companion is healthy
    if not config.bedrock_llm.enabled:
        health_status['bedrock_llm'] = {'healthy': True, 'service': 'Amazon Bedrock LLM', 'enabled': False}
        return health_status

    try:
        if llm is None:
            if not has_credentials():
                raise RuntimeError('no AWS credentials found')
            llm = BedrockLLM(config.bedrock_llm)
        health_status['bedrock_llm'] = {
            'healthy': llm.health_check(),
            'service': 'Amazon Bedrock LLM',
            'enabled': True,
            'model': config.bedrock_llm.model_id
        }
    except Exception as e:
        health_status['bedrock_llm'] = {'healthy': False, 'service': 'Amazon Bedrock LLM', 'enabled': True, 'error': str(e)}

    return health_status


def check_health(config: AppConfig, storage: BlobStore, llm: Optional[BedrockLLM] = None) -> bool:
    """Check the health of all system components.

    Returns:
        True if all components are healthy, False otherwise
    """
    health_status = get_health_status(config, storage, llm)
    all_healthy = all(status.get('healthy', False) for status in health_status.values())

    if all_healthy:
        logger.info('All system components are healthy')
    else:
        logger.warning('Some system components are unhealthy')

    return all_healthy
