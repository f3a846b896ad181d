"""
Learner Profile - Text Embedding Client
Sends profile narratives to the Gemini embedding API and returns unit vectors
"""

import logging
import math
from typing import Dict, List, Sequence

import requests

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

EMBEDDING_API_BASE = 'https://generativelanguage.googleapis.com/v1beta/models'
DEFAULT_EMBEDDING_MODEL = 'gemini-embedding-001'
DEFAULT_EMBEDDING_DIMENSIONS = 1536
TASK_TYPE = 'RETRIEVAL_DOCUMENT'


class EmbeddingError(RuntimeError):
    """Embedding service could not return a vector"""


def normalize(vector: Sequence[float]) -> List[float]:
    """Scale a vector to unit length (L2). Reduced-dimension vectors need this."""
    norm = math.sqrt(sum(value * value for value in vector))
    if norm == 0:
        return list(vector)
    return [value / norm for value in vector]


# ============================================================================
# EMBEDDING API CLIENT
# ============================================================================

class GeminiEmbeddingClient:
    """Handles communication with the Gemini embedding endpoint"""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_EMBEDDING_MODEL,
        dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS,
        timeout: float = 10,
    ):
        if not api_key:
            raise ValueError('api_key is required for the embedding client')
        self.api_key = api_key
        self.model = model
        self.dimensions = dimensions
        self.request_timeout = timeout
        self.headers = {'Content-Type': 'application/json'}

    def _request_body(self, text: str) -> Dict:
        return {
            'model': f"models/{self.model}",
            'content': {'parts': [{'text': text}]},
            'taskType': TASK_TYPE,
            'outputDimensionality': self.dimensions,
        }

    def _post(self, method: str, payload: Dict) -> Dict:
        url = f"{EMBEDDING_API_BASE}/{self.model}:{method}"
        try:
            response = requests.post(
                url,
                params={'key': self.api_key},
                json=payload,
                headers=self.headers,
                timeout=self.request_timeout,
            )
        except requests.Timeout as e:
            raise EmbeddingError(f"Timeout calling {method}") from e
        except requests.RequestException as e:
            raise EmbeddingError(f"Error calling {method}: {e}") from e

        if response.status_code != 200:
            logger.warning(f"⚠ Embedding API returned {response.status_code} for {method}")
            raise EmbeddingError(f"Embedding API returned {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise EmbeddingError('Invalid JSON from embedding API') from e

    def embed(self, text: str) -> List[float]:
        """
        Embed a single narrative

        Args:
            text: Profile narrative

        Returns:
            Unit-length vector of `dimensions` floats
        """
        data = self._post('embedContent', self._request_body(text))
        try:
            values = data['embedding']['values']
        except (KeyError, TypeError) as e:
            raise EmbeddingError('Embedding response missing values') from e

        logger.info(f"✓ Embedded narrative ({len(values)} dims)")
        return normalize(values)

    def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed several narratives in one request, preserving order"""
        if not texts:
            return []

        data = self._post(
            'batchEmbedContents',
            {'requests': [self._request_body(text) for text in texts]},
        )
        try:
            vectors = [item['values'] for item in data['embeddings']]
        except (KeyError, TypeError) as e:
            raise EmbeddingError('Batch embedding response missing values') from e

        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Expected {len(texts)} embeddings, got {len(vectors)}"
            )

        logger.info(f"✓ Embedded {len(vectors)} narratives")
        return [normalize(vector) for vector in vectors]
