"""
Almacén de artefactos (IPFS vía Pinata).

upload() devuelve el hash de contenido; la URL pública se deriva siempre
del gateway configurado + hash.
"""
import httpx

from albaranes.core.config import settings
from albaranes.core.logger import logger


class ArtifactStoreError(RuntimeError):
    pass


class PinataArtifactStore:
    def __init__(
        self,
        jwt_token: str | None,
        api_url: str = "https://api.pinata.cloud",
        gateway: str = "gateway.pinata.cloud",
        timeout: float = 10.0,
    ):
        self.jwt_token = jwt_token
        self.api_url = api_url.rstrip("/")
        self.gateway = gateway.replace("https://", "").replace("http://", "").strip("/")
        self.timeout = timeout

    def url_for(self, content_hash: str) -> str:
        return f"https://{self.gateway}/ipfs/{content_hash}"

    async def upload(self, data: bytes, filename: str) -> str:
        if not self.jwt_token:
            raise ArtifactStoreError("PINATA_JWT no está configurado")

        url = f"{self.api_url}/pinning/pinFileToIPFS"
        headers = {"Authorization": f"Bearer {self.jwt_token}"}
        files = {"file": (filename, data)}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, headers=headers, files=files)
            resp.raise_for_status()
            content_hash = resp.json()["IpfsHash"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            raise ArtifactStoreError(f"Error subiendo {filename} a Pinata: {e}") from e

        logger.info(f"Subido {filename} a IPFS: {content_hash}")
        return content_hash


def build_artifact_store() -> PinataArtifactStore:
    return PinataArtifactStore(
        jwt_token=settings.PINATA_JWT,
        api_url=settings.PINATA_API_URL,
        gateway=settings.PINATA_GATEWAY_URL,
        timeout=settings.HTTP_TIMEOUT,
    )


async def fetch_image(url: str) -> bytes:
    """Descarga una imagen remota (firma) para incrustarla en el PDF."""
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT, follow_redirects=True) as client:
        resp = await client.get(url)
    resp.raise_for_status()
    return resp.content
