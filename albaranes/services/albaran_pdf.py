# albaranes/services/albaran_pdf.py

import textwrap
from io import BytesIO

from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader

from albaranes.core.logger import logger

TITULO = "Albarán de Proyecto"
SIN_CLIENTE = "Sin cliente"
ERROR_FIRMA = "[Error al cargar la imagen de firma]"
ANCHO_FIRMA = 150


def _fmt_num(value) -> str:
    # 5.0 -> "5", 2.5 -> "2.5"
    value = float(value or 0)
    return f"{value:g}"


class _Escritor:
    """Escribe líneas de arriba abajo y salta de página cuando no caben."""

    def __init__(self, c, margen_x=50, margen_y=50):
        self.c = c
        self.ancho, self.alto = A4
        self.margen_x = margen_x
        self.margen_y = margen_y
        self.y = self.alto - margen_y

    def asegurar(self, altura):
        if self.y - altura < self.margen_y:
            self.c.showPage()
            self.y = self.alto - self.margen_y

    def linea(self, texto, fuente="Helvetica", tam=12, ancho_wrap=85):
        for trozo in textwrap.wrap(str(texto), ancho_wrap) or [""]:
            self.asegurar(tam + 4)
            self.c.setFont(fuente, tam)
            self.c.drawString(self.margen_x, self.y, trozo)
            self.y -= tam + 4

    def centrada(self, texto, fuente="Helvetica-Bold", tam=20):
        self.asegurar(tam + 10)
        self.c.setFont(fuente, tam)
        self.c.drawCentredString(self.ancho / 2, self.y, texto)
        self.y -= tam + 10

    def espacio(self, puntos=12):
        self.y -= puntos

    def imagen(self, data: bytes, ancho=ANCHO_FIRMA):
        img = ImageReader(BytesIO(data))
        w, h = img.getSize()
        alto = ancho * h / w
        self.asegurar(alto)
        self.c.drawImage(img, self.margen_x, self.y - alto, width=ancho, height=alto, mask="auto")
        self.y -= alto + 10


def generar_albaran_pdf(note, firma: bytes | None = None) -> bytes:
    """
    Genera el PDF de un albarán en memoria.

    Orden: título, proyecto (nombre/código), cliente, dirección de obra,
    creador, fecha, descripción, horas, materiales y firma. Si el albarán
    está firmado pero la imagen no llega o no se puede leer, se escribe un
    aviso en su lugar: el documento se completa siempre.
    """
    if note is None:
        raise ValueError("Albarán no válido")

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Albarán {note.id}")
    e = _Escritor(c)

    # -----------------------------
    # TÍTULO
    # -----------------------------
    e.centrada(TITULO)
    e.espacio()

    # -----------------------------
    # PROYECTO Y CLIENTE
    # -----------------------------
    project = note.project
    client = getattr(project, "client", None) if project else None
    direccion = (getattr(project, "address", None) or {}) if project else {}

    e.linea(f"Proyecto: {getattr(project, 'name', '-')}", tam=14)
    e.linea(f"Código: {getattr(project, 'project_code', '-')}", tam=14)
    e.linea(f"Cliente: {getattr(client, 'name', None) or SIN_CLIENTE}", tam=14)
    e.linea(
        f"Dirección: {direccion.get('street') or '-'}, {direccion.get('city') or '-'}",
        tam=14,
    )
    e.espacio()

    # -----------------------------
    # USUARIO Y FECHA
    # -----------------------------
    creador = note.created_by
    nombre_creador = (getattr(creador, "name", "") or getattr(creador, "email", "")) if creador else "-"
    e.linea(f"Creado por: {nombre_creador}", tam=14)
    e.linea(f"Fecha: {note.date.strftime('%d/%m/%Y')}", tam=14)
    e.espacio()

    # -----------------------------
    # DESCRIPCIÓN
    # -----------------------------
    if note.description:
        e.linea("Descripción:", tam=14)
        e.linea(note.description)
        e.espacio()

    # -----------------------------
    # HORAS
    # -----------------------------
    if note.work_entries:
        e.linea("Personas y Horas:", tam=14)
        for entry in note.work_entries:
            e.linea(f"- {entry.get('person')}: {_fmt_num(entry.get('hours'))} horas")
        e.espacio()

    # -----------------------------
    # MATERIALES
    # -----------------------------
    if note.material_entries:
        e.linea("Materiales:", tam=14)
        for entry in note.material_entries:
            e.linea(f"- {entry.get('name')}: {_fmt_num(entry.get('quantity'))}")
        e.espacio()

    # -----------------------------
    # FIRMA
    # -----------------------------
    if note.signature:
        e.linea("Firma:", tam=14)
        if firma:
            try:
                e.imagen(firma)
            except Exception as ex:
                logger.warning(f"Firma ilegible en albarán {note.id}: {ex}")
                e.linea(ERROR_FIRMA)
        else:
            e.linea(ERROR_FIRMA)

    c.save()
    buffer.seek(0)
    return buffer.getvalue()
