import os
from typing import Dict, NamedTuple, Optional

from gf2crc.bits import bits_from_hex, is_bitstring

DEFAULT_MESSAGE = "10001000100010001000000110000001"  # 32 bits
DEFAULT_POLY = "1011011"                              # x^6 + x^4 + x^3 + x + 1
DEFAULT_OUTPUT = "resultado_crc.txt"


class Settings(NamedTuple):
    message_bits: str = DEFAULT_MESSAGE
    poly_bits: str = DEFAULT_POLY
    output: Optional[str] = DEFAULT_OUTPUT
    flip: Optional[int] = None
    verbose: bool = True


def load_env(path: str = ".env") -> Dict[str, str]:
    """
    Lee variables sencillas desde un .env local.
    Formato: CLAVE=valor por línea. Ignoramos comentarios y líneas vacías.
    """
    env: Dict[str, str] = {}
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                env[k.strip()] = v.strip()
    return env


def settings_from_env(env: Dict[str, str]) -> Settings:
    """
    Arma Settings a partir del .env. MESSAGE_HEX gana sobre MESSAGE_BITS si
    vienen los dos. OUTPUT_FILE vacío = sin archivo.
    """
    msg = env.get("MESSAGE_BITS", DEFAULT_MESSAGE)
    if env.get("MESSAGE_HEX"):
        msg = bits_from_hex(env["MESSAGE_HEX"])
    if not is_bitstring(msg):
        raise ValueError(f"MESSAGE_BITS inválido: {msg!r}")

    flip = env.get("FLIP_BIT")
    return Settings(
        message_bits=msg.replace(" ", ""),
        poly_bits=env.get("POLY_BITS", DEFAULT_POLY),
        output=env.get("OUTPUT_FILE", DEFAULT_OUTPUT) or None,
        flip=int(flip) if flip else None,
    )
