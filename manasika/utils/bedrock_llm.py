"""
Amazon Bedrock LLM client wrapper with retry logic and error handling.
"""

import random
import time
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .config import BedrockLLMConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class BedrockLLMError(Exception):
    """Custom exception for Bedrock LLM errors."""
    pass


def has_credentials(session: Optional[boto3.Session] = None) -> bool:
    """Check whether AWS credentials resolve for the hosted companion.

    Args:
        session: boto3 Session to inspect, a default session if None

    Returns:
        True if the credential chain yields credentials, False otherwise
    """
    try:
        session = session or boto3.Session()
        return session.get_credentials() is not None
    except BotoCoreError as e:
        logger.warning(f'Failed to resolve AWS credentials: {e}')
        return False


class BedrockLLM:
    """Amazon Bedrock LLM client with retry logic and error handling."""

    def __init__(self, config: BedrockLLMConfig, client: Any = None):
        """
        Initialize Bedrock LLM client.

        Args:
            config: BedrockLLMConfig instance with connection parameters
            client: Pre-built bedrock-runtime client, created from config if None
        """
        self.config = config
        self.model_id = config.model_id

        # Create Bedrock runtime client with timeout configuration
        self.bedrock_runtime = client or boto3.client(
            'bedrock-runtime',
            region_name=config.region,
            config=BotoConfig(
                connect_timeout=config.timeout,
                read_timeout=config.timeout,
                retries={'max_attempts': 0}  # We handle retries manually
            ))

        logger.info(f'Initialized Bedrock LLM client with model: {self.model_id}')

    @staticmethod
    def _extract_text(response: Dict[str, Any]) -> str:
        """Pull the reply text out of a converse response.

        Raises:
            BedrockLLMError: If the body is malformed or holds no text
        """
        try:
            blocks = response['output']['message']['content']
            text = ''.join(block.get('text', '') for block in blocks)
        except (KeyError, TypeError, AttributeError) as e:
            raise BedrockLLMError(f'Malformed Bedrock LLM response: {e}')

        if not text.strip():
            raise BedrockLLMError('Bedrock LLM returned an empty response')
        return text

    def generate_response(self,
                          messages: List[Dict[str, Any]],
                          system_prompt: str,
                          max_tokens: Optional[int] = None,
                          temperature: Optional[float] = None) -> str:
        """
        Generate response using Bedrock LLM with retry logic.

        Args:
            messages: List of message dictionaries in Bedrock format
            system_prompt: System prompt for the conversation
            max_tokens: Maximum tokens to generate (uses config default if None)
            temperature: Temperature for generation (uses config default if None)

        Returns:
            Response text

        Raises:
            BedrockLLMError: If all retry attempts fail or the response is malformed
        """
        max_tokens = max_tokens or self.config.max_tokens
        temperature = self.config.temperature if temperature is None else temperature

        system = [{'text': system_prompt}]
        inf_params = {
            'maxTokens': max_tokens,
            'temperature': temperature,
        }

        attempts = max(1, self.config.retry_attempts)
        for attempt in range(attempts):
            try:
                logger.debug(f'Bedrock LLM request attempt {attempt + 1}/{attempts}')

                response = self.bedrock_runtime.converse(modelId=self.model_id,
                                                         messages=messages,
                                                         system=system,
                                                         inferenceConfig=inf_params)
                msg = self._extract_text(response)

                logger.debug(f'Bedrock LLM response generated successfully (length: {len(msg)})')
                return msg

            except (ClientError, BotoCoreError) as e:
                logger.warning(f'Bedrock LLM attempt {attempt + 1}/{attempts} failed: {e}')

                if attempt < attempts - 1:
                    # Exponential backoff with jitter
                    delay = self.config.retry_delay * (2**attempt) + random.uniform(0, 1)
                    time.sleep(delay)
                else:
                    raise BedrockLLMError(f'Bedrock LLM failed after {attempts} attempts: {e}')

            except BedrockLLMError:
                raise

            except Exception as e:
                logger.error(f'Unexpected error in Bedrock LLM: {e}')
                raise BedrockLLMError(f'Unexpected Bedrock LLM error: {e}')

        raise BedrockLLMError(f'Bedrock LLM failed after {attempts} attempts')

    def health_check(self) -> bool:
        """
        Perform a health check on the Bedrock LLM service.

        Returns:
            True if service is healthy, False otherwise
        """
        try:
            test_messages = [{'role': 'user', 'content': [{'text': 'Hi'}]}]
            response = self.generate_response(messages=test_messages,
                                              system_prompt="You are a helpful assistant. Respond with just 'OK'.",
                                              max_tokens=10,
                                              temperature=0.0)
            return len(response.strip()) > 0

        except BedrockLLMError as e:
            logger.error(f'Bedrock LLM health check failed: {e}')
            return False
