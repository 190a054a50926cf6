from typing import Awaitable, Callable, Optional

from albaranes.core.logger import logger
from albaranes.services.albaran_pdf import generar_albaran_pdf
from albaranes.services.artifact_store import PinataArtifactStore

ImageFetcher = Callable[[str], Awaitable[bytes]]


class NoteDocuments:
    """Genera el PDF de un albarán y publica artefactos en el almacén."""

    def __init__(self, store: PinataArtifactStore, fetch_image: ImageFetcher):
        self.store = store
        self.fetch_image = fetch_image

    async def render(self, note, signature_image: Optional[bytes] = None) -> bytes:
        firma = signature_image
        if note.signature and firma is None:
            try:
                firma = await self.fetch_image(note.signature)
            except Exception as e:
                # Sin firma legible el PDF sale igualmente, con un aviso
                logger.warning(f"No se pudo descargar la firma del albarán {note.id}: {e}")
                firma = None

        return generar_albaran_pdf(note, firma)

    async def publish(self, data: bytes, filename: str) -> str:
        content_hash = await self.store.upload(data, filename)
        return self.store.url_for(content_hash)
