# app/services/product_client.py
import requests
from requests import RequestException

from app.domain.errors import TransientStoreError
from app.utils.retry import http_retry
from app.utils.settings import PRODUCT_SERVICE_URL, PRODUCT_SERVICE_TIMEOUT
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    """
    Klient katalogu produktow.
    get - jeden produkt (przy dodawaniu, zeby poznac sklep)
    batch_get - wiele produktow jednym requestem (wzbogacanie koszyka)
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout or PRODUCT_SERVICE_TIMEOUT
        self.session = requests.Session()

    @http_retry()
    def _get(self, path: str, params: dict | None = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"ProductClient GET {url}")
        resp = self.session.get(url, params=params, timeout=self.timeout)
        # 404 to nie blad transportu, decyduje wywolujacy
        if resp.status_code != 404:
            resp.raise_for_status()
        return resp

    def get(self, item_id: str) -> dict | None:
        try:
            resp = self._get(f"/products/{item_id}")
            if resp.status_code == 404:
                return None
            product = resp.json()
        except (RequestException, ValueError) as e:
            raise TransientStoreError(f"Katalog produktow niedostepny: {e}") from e

        if not isinstance(product, dict):
            raise TransientStoreError("Katalog zwrocil niepoprawny produkt")
        return product

    def batch_get(self, item_ids: list[str]) -> dict[str, dict]:
        ids = list(dict.fromkeys(item_ids))
        if not ids:
            return {}

        try:
            resp = self._get("/products", params={"ids": ",".join(ids)})
            if resp.status_code == 404:
                return {}
            body = resp.json()
        except (RequestException, ValueError) as e:
            raise TransientStoreError(f"Katalog produktow niedostepny: {e}") from e

        if not isinstance(body, list):
            raise TransientStoreError("Katalog zwrocil niepoprawna liste produktow")

        # rekordy bez id pomijamy, pozycja dostanie wartosci domyslne
        return {
            str(p["id"]): p
            for p in body
            if isinstance(p, dict) and p.get("id") is not None
        }
