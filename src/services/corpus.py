"""
Common Voice sentence API client.

Fetches prompt sentences for a language in fixed-size pages. Transient
transport failures are retried; HTTP errors surface as
:class:`CorpusAPIError`.
"""

import json
import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.core.config import get_settings
from src.core.exceptions import CorpusAPIError
from src.core.models import CorpusSentence

logger = logging.getLogger(__name__)


class CommonVoiceClient:
    """Async client for the Common Voice ``/sentences`` endpoint.

    Args:
        base_url: API root (falls back to settings if not provided).
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.corpus_api_url).rstrip("/")
        self._license = settings.corpus_license
        self._batch_size = settings.corpus_batch_size
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout if timeout is not None else settings.corpus_timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CommonVoiceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        response = await self._client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def get_sentences(
        self,
        language_code: str = "luo",
        limit: int = 50,
        offset: int = 0,
        taxonomy: dict[str, str] | None = None,
    ) -> list[CorpusSentence]:
        """Return one page of sentences.

        Raises:
            CorpusAPIError: On HTTP errors, exhausted retries or a malformed body.
        """
        if taxonomy is None:
            taxonomy = {"Licence": self._license}
        params = {
            "languageCode": language_code,
            "limit": limit,
            "offset": offset,
            "taxonomy": json.dumps(taxonomy),
        }
        try:
            body = await self._get("/sentences", params)
        except httpx.HTTPStatusError as exc:
            raise CorpusAPIError(
                f"HTTP {exc.response.status_code} from {exc.request.url.path}"
            ) from exc
        except httpx.HTTPError as exc:
            raise CorpusAPIError(str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise CorpusAPIError(f"invalid JSON response: {exc}") from exc

        items = body.get("sentences", body.get("data", [])) if isinstance(body, dict) else body
        if not isinstance(items, list):
            raise CorpusAPIError("unexpected response shape")
        sentences = []
        for item in items:
            if isinstance(item, str):
                sentences.append(CorpusSentence(text=item, language_code=language_code))
            else:
                sentences.append(CorpusSentence.model_validate(item))
        return sentences

    async def fetch_all_sentences(
        self,
        language_code: str = "luo",
        batch_size: int | None = None,
        taxonomy: dict[str, str] | None = None,
    ) -> list[CorpusSentence]:
        """Page through every sentence for *language_code*.

        Stops at the first empty page. An error on a later page ends the
        walk and returns what was collected so far; an error on the first
        page is raised.

        Raises:
            CorpusAPIError: If the first page cannot be fetched.
        """
        batch_size = batch_size or self._batch_size
        collected: list[CorpusSentence] = []
        offset = 0
        while True:
            try:
                batch = await self.get_sentences(language_code, batch_size, offset, taxonomy)
            except CorpusAPIError:
                if offset == 0:
                    raise
                logger.warning(
                    "Error fetching sentence batch at offset %d; keeping %d sentences",
                    offset,
                    len(collected),
                )
                break
            if not batch:
                break
            collected.extend(batch)
            offset += batch_size
            logger.debug("Loaded %d sentences so far", len(collected))

        logger.info("Fetched %d %s sentences from Common Voice", len(collected), language_code)
        return collected
