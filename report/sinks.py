import sys
from typing import Iterable, List, Optional, TextIO


class ConsoleSink:
    def __init__(self, stream: Optional[TextIO] = None):
        # None = sys.stdout al momento de escribir (así pytest capsys lo ve)
        self.stream = stream

    def write_line(self, line: str) -> None:
        print(line, file=self.stream or sys.stdout)

    def close(self) -> None:
        pass


class FileSink:
    """
    Escribe cada línea en un archivo de texto (UTF-8, se pisa si existe).
    Sirve como context manager.
    """

    def __init__(self, path: str):
        self.path = path
        self._fp = open(path, "w", encoding="utf-8")

    def write_line(self, line: str) -> None:
        self._fp.write(line + "\n")

    def close(self) -> None:
        if not self._fp.closed:
            self._fp.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class TeeLogger:
    """
    Logger "duplo": manda cada línea a todos los sinks suscriptos
    (consola, archivo, una lista en los tests...). Con cero sinks no hace nada.
    """

    def __init__(self, *sinks):
        self._sinks: List = list(sinks)

    @property
    def sinks(self) -> List:
        return list(self._sinks)

    def subscribe(self, sink) -> None:
        self._sinks.append(sink)

    def unsubscribe(self, sink) -> None:
        self._sinks.remove(sink)

    def emit(self, line: str = "") -> None:
        for s in self._sinks:
            s.write_line(line)

    def emit_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.emit(line)

    def close(self) -> None:
        for s in self._sinks:
            s.close()


def open_file_sink(path: str) -> Optional[FileSink]:
    """
    Intenta abrir el archivo de salida. Si no se puede, avisa por stderr y
    devuelve None: la corrida sigue solo por consola.
    """
    try:
        return FileSink(path)
    except OSError as e:
        print(f"Aviso: no pude abrir {path} para escritura ({e}).", file=sys.stderr)
        return None
