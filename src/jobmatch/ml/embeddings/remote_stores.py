"""
Remote vector store backends.

PineconeVectorStore talks to a managed vector index (upsert / query /
delete by id or all). WeaviateVectorStore talks to an object store whose
objects carry a vector and properties. Both speak plain HTTP over a
shared aiohttp session with a bounded timeout.
"""

import asyncio
import json
import uuid
from typing import Any, Optional

import aiohttp

from jobmatch.data.models import Document, SearchResult
from jobmatch.utils.config import PineconeSettings, WeaviateSettings, get_settings
from jobmatch.utils.constants import VectorBackend
from jobmatch.utils.exceptions import (
    MalformedResponseError,
    NetworkError,
    ProviderUnavailableError,
    RequestTimeoutError,
)
from jobmatch.utils.logger import get_logger

from .embedding_model import EmbeddingProvider
from .hybrid_scorer import HybridScorer
from .vector_store import MetadataFilter, VectorStore

logger = get_logger(__name__)

# Namespace for deterministic Weaviate object ids
WEAVIATE_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_DNS, "jobmatch.vector-store")

# Reserved Pinecone metadata key holding the document text
PINECONE_TEXT_KEY = "_text"


class RemoteVectorStore(VectorStore):
    """Base class for stores backed by an HTTP vector database."""

    service_name: str = "remote"

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str],
        embedding_provider: Optional[EmbeddingProvider] = None,
        scorer: Optional[HybridScorer] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(embedding_provider, scorer)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or get_settings().vector_store.request_timeout
        self._headers = headers
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get the HTTP session (lazy initialization)."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self._headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[dict[str, Any]] = None,
        missing_ok: bool = False,
    ) -> Any:
        """
        Send one request and decode the JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the service base URL.
            payload: Optional JSON body.
            missing_ok: Treat 404 as success (returns None).

        Raises:
            RequestTimeoutError: If the call exceeds the timeout.
            NetworkError: On connection errors or non-success status.
            MalformedResponseError: If the body is not valid JSON.
        """
        url = f"{self.base_url}{path}"
        try:
            async with self.session.request(method, url, json=payload) as response:
                if missing_ok and response.status == 404:
                    return None
                if response.status >= 400:
                    body = await response.text()
                    raise NetworkError(
                        f"{self.service_name} {method} {path} failed with status "
                        f"{response.status}: {body[:200]}",
                        service=self.service_name,
                        status=response.status,
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise MalformedResponseError(
                        f"{self.service_name} {method} {path} returned invalid JSON",
                        service=self.service_name,
                        cause=e,
                    ) from e
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(
                f"{self.service_name} {method} {path} timed out after {self.timeout}s",
                timeout=self.timeout,
                service=self.service_name,
                cause=e,
            ) from e
        except aiohttp.ClientError as e:
            raise NetworkError(
                f"{self.service_name} {method} {path} failed: {e}",
                service=self.service_name,
                cause=e,
            ) from e

    def _malformed(self, message: str, cause: Optional[Exception] = None) -> MalformedResponseError:
        return MalformedResponseError(
            f"{self.service_name}: {message}", service=self.service_name, cause=cause
        )

    def _score(self, value: Any) -> float:
        """Parse a numeric score field from a response."""
        if isinstance(value, bool):
            raise self._malformed(f"score {value!r} is not a number")
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise self._malformed(f"score {value!r} is not a number", cause=e) from e

    @staticmethod
    def _apply_filter(
        results: list[SearchResult],
        filter: Optional[MetadataFilter],
    ) -> list[SearchResult]:
        if filter is None:
            return results
        return [r for r in results if filter(r.metadata)]


def _pinecone_metadata(doc: Document) -> dict[str, Any]:
    """
    Flatten metadata into the value types Pinecone accepts.

    Nulls are dropped, lists become lists of strings, and anything else
    that is not a scalar is stored as its string form.
    """
    metadata: dict[str, Any] = {}
    for key, value in doc.metadata.items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            metadata[key] = value
        elif isinstance(value, (list, tuple, set)):
            metadata[key] = [str(v) for v in value]
        else:
            metadata[key] = str(value)
    metadata[PINECONE_TEXT_KEY] = doc.text
    return metadata


class PineconeVectorStore(RemoteVectorStore):
    """
    Pinecone-backed vector store.

    Document text travels in the reserved ``_text`` metadata field and is
    split back out of the metadata on search, so caller keys such as
    ``text`` survive the round trip.
    """

    backend = VectorBackend.PINECONE
    service_name = "pinecone"

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        settings: Optional[PineconeSettings] = None,
        timeout: Optional[float] = None,
        scorer: Optional[HybridScorer] = None,
    ):
        """
        Initialize the Pinecone store.

        Raises:
            ProviderUnavailableError: If the API key or index location
                is not configured.
        """
        settings = settings or get_settings().pinecone
        if not settings.is_configured:
            raise ProviderUnavailableError("PINECONE_API_KEY is not set", provider="pinecone")
        if not settings.host and not settings.environment:
            raise ProviderUnavailableError(
                "Set PINECONE_HOST or PINECONE_ENVIRONMENT to locate the index",
                provider="pinecone",
            )

        super().__init__(
            base_url=settings.base_url,
            headers={"Api-Key": settings.api_key, "Content-Type": "application/json"},
            embedding_provider=embedding_provider,
            scorer=scorer,
            timeout=timeout,
        )
        self.index_name = settings.index
        self.batch_size = settings.upsert_batch_size
        logger.info(f"Pinecone vector store ready: {self.base_url}")

    async def _persist(self, documents: list[Document]) -> None:
        for start in range(0, len(documents), self.batch_size):
            chunk = documents[start:start + self.batch_size]
            vectors = [
                {"id": doc.id, "values": doc.embedding, "metadata": _pinecone_metadata(doc)}
                for doc in chunk
            ]
            await self._request("POST", "/vectors/upsert", {"vectors": vectors})
        logger.debug(f"Upserted {len(documents)} vectors to Pinecone index {self.index_name}")

    async def _query(
        self,
        query_vector: list[float],
        top_k: int,
        filter: Optional[MetadataFilter],
    ) -> list[SearchResult]:
        data = await self._request(
            "POST",
            "/query",
            {"vector": query_vector, "topK": top_k, "includeMetadata": True},
        )
        if not isinstance(data, dict):
            raise self._malformed("query response is not an object")

        matches = data.get("matches") or []
        if not isinstance(matches, list):
            raise self._malformed("'matches' is not an array")

        results = []
        for match in matches:
            if not isinstance(match, dict) or "id" not in match:
                raise self._malformed("match without an id")
            metadata = match.get("metadata") or {}
            if not isinstance(metadata, dict):
                raise self._malformed(f"metadata of match {match['id']!r} is not an object")
            metadata = dict(metadata)
            text = metadata.pop(PINECONE_TEXT_KEY, "")
            score = match.get("score")
            results.append(SearchResult(
                id=str(match["id"]),
                score=0.0 if score is None else self._score(score),
                metadata=metadata,
                text=str(text),
            ))
        return self._apply_filter(results, filter)

    async def delete(self, doc_id: str) -> None:
        """Delete a vector by ID."""
        await self._request("POST", "/vectors/delete", {"ids": [doc_id]})
        logger.debug(f"Deleted {doc_id} from Pinecone index {self.index_name}")

    async def clear(self) -> None:
        """Delete every vector in the index."""
        await self._request("POST", "/vectors/delete", {"deleteAll": True})
        logger.info(f"Cleared Pinecone index: {self.index_name}")

    async def count(self) -> int:
        data = await self._request("POST", "/describe_index_stats", {})
        if not isinstance(data, dict):
            raise self._malformed("index stats response is not an object")
        try:
            return int(data.get("totalVectorCount") or 0)
        except (TypeError, ValueError) as e:
            raise self._malformed("totalVectorCount is not a number", cause=e) from e


class WeaviateVectorStore(RemoteVectorStore):
    """
    Weaviate-backed vector store.

    Weaviate requires UUID object ids, so each document id is mapped to a
    deterministic UUIDv5 and kept verbatim in the ``docId`` property.
    Metadata is stored as a JSON string in ``metadataJson`` so arbitrary
    keys survive without a schema change.
    """

    backend = VectorBackend.WEAVIATE
    service_name = "weaviate"

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        settings: Optional[WeaviateSettings] = None,
        timeout: Optional[float] = None,
        scorer: Optional[HybridScorer] = None,
    ):
        """
        Initialize the Weaviate store.

        Raises:
            ProviderUnavailableError: If WEAVIATE_URL is not configured.
        """
        settings = settings or get_settings().weaviate
        if not settings.is_configured:
            raise ProviderUnavailableError("WEAVIATE_URL is not set", provider="weaviate")

        headers = {"Content-Type": "application/json"}
        if settings.api_key:
            headers["Authorization"] = f"Bearer {settings.api_key}"

        super().__init__(
            base_url=settings.url,
            headers=headers,
            embedding_provider=embedding_provider,
            scorer=scorer,
            timeout=timeout,
        )
        self.class_name = settings.class_name
        logger.info(f"Weaviate vector store ready: {self.base_url} (class {self.class_name})")

    @staticmethod
    def object_id(doc_id: str) -> str:
        """Deterministic Weaviate UUID for a document id."""
        return str(uuid.uuid5(WEAVIATE_ID_NAMESPACE, doc_id))

    async def _persist(self, documents: list[Document]) -> None:
        objects = [
            {
                "class": self.class_name,
                "id": self.object_id(doc.id),
                "vector": doc.embedding,
                "properties": {
                    "docId": doc.id,
                    "text": doc.text,
                    "metadataJson": json.dumps(doc.metadata, default=str),
                },
            }
            for doc in documents
        ]
        data = await self._request("POST", "/v1/batch/objects", {"objects": objects})
        if not isinstance(data, list):
            raise self._malformed("batch response is not an array")

        failed = [
            obj for obj in data
            if isinstance(obj, dict) and ((obj.get("result") or {}).get("errors"))
        ]
        if failed:
            raise NetworkError(
                f"weaviate rejected {len(failed)} of {len(objects)} objects",
                service=self.service_name,
                details={"errors": [obj["result"]["errors"] for obj in failed[:5]]},
            )
        logger.debug(f"Added {len(objects)} objects to Weaviate class {self.class_name}")

    async def _graphql(self, query: str) -> dict[str, Any]:
        data = await self._request("POST", "/v1/graphql", {"query": query})
        if not isinstance(data, dict):
            raise self._malformed("GraphQL response is not an object")
        if data.get("errors"):
            raise NetworkError(
                f"weaviate GraphQL query failed: {data['errors']}",
                service=self.service_name,
            )
        if not isinstance(data.get("data"), dict):
            raise self._malformed("GraphQL response has no data")
        return data["data"]

    async def _query(
        self,
        query_vector: list[float],
        top_k: int,
        filter: Optional[MetadataFilter],
    ) -> list[SearchResult]:
        query = (
            "{ Get { %s(nearVector: {vector: %s}, limit: %d) "
            "{ docId text metadataJson _additional { id distance } } } }"
            % (self.class_name, json.dumps(query_vector), top_k)
        )
        data = await self._graphql(query)
        get = data.get("Get") or {}
        if not isinstance(get, dict):
            raise self._malformed("'Get' is not an object")
        objects = get.get(self.class_name) or []
        if not isinstance(objects, list):
            raise self._malformed("near-vector result is not an array")

        results = []
        for obj in objects:
            results.append(self._to_result(obj))
        return self._apply_filter(results, filter)

    def _to_result(self, obj: Any) -> SearchResult:
        if not isinstance(obj, dict):
            raise self._malformed("result object is not an object")

        additional = obj.get("_additional") or {}
        if not isinstance(additional, dict):
            raise self._malformed("'_additional' is not an object")
        distance = additional.get("distance")
        if distance is None:
            raise self._malformed("result object has no distance")
        # Cosine distance: similarity = 1 - distance
        score = 1.0 - self._score(distance)

        try:
            metadata = json.loads(obj.get("metadataJson") or "{}")
        except (TypeError, ValueError) as e:
            raise MalformedResponseError(
                "weaviate: metadataJson is not valid JSON", service=self.service_name, cause=e
            ) from e

        return SearchResult(
            id=str(obj.get("docId") or additional.get("id")),
            score=score,
            metadata=metadata if isinstance(metadata, dict) else {},
            text=str(obj.get("text") or ""),
        )

    async def delete(self, doc_id: str) -> None:
        """Delete an object by document ID; missing objects are ignored."""
        await self._request(
            "DELETE",
            f"/v1/objects/{self.class_name}/{self.object_id(doc_id)}",
            missing_ok=True,
        )
        logger.debug(f"Deleted {doc_id} from Weaviate class {self.class_name}")

    async def clear(self) -> None:
        """Delete every object of the class."""
        payload = {
            "match": {
                "class": self.class_name,
                "where": {"path": ["docId"], "operator": "Like", "valueText": "*"},
            },
            "output": "minimal",
        }
        await self._request("DELETE", "/v1/batch/objects", payload)
        logger.info(f"Cleared Weaviate class: {self.class_name}")

    async def count(self) -> int:
        data = await self._graphql("{ Aggregate { %s { meta { count } } } }" % self.class_name)
        groups = (data.get("Aggregate") or {}).get(self.class_name) or []
        if not isinstance(groups, list):
            raise self._malformed("aggregate result is not an array")
        if not groups:
            return 0
        try:
            return int(groups[0]["meta"]["count"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponseError(
                "weaviate: aggregate count missing", service=self.service_name, cause=e
            ) from e
