from albaranes.core.errors import InvalidArgument

# Mayor entero que cabe en una columna INTEGER (64 bits con signo)
MAX_ID = 2**63 - 1


def parse_id(value, message: str = "ID inválido") -> int:
    """
    Valida un identificador recibido en la ruta antes de consultar la BD.
    Solo se aceptan enteros positivos en forma decimal y dentro de rango.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 < value <= MAX_ID:
            return value
        raise InvalidArgument(message)

    text = str(value or "").strip()
    if not text.isdigit() or not text.isascii():
        raise InvalidArgument(message)

    parsed = int(text)
    if not 0 < parsed <= MAX_ID:
        raise InvalidArgument(message)
    return parsed
