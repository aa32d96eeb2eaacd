"""Decimal (SI) byte unit conversion."""

from typing import Dict


class ByteConverter:
    """Converts ``<number><unit letter>`` strings between byte units.

    Units are powers of 1000: ``b``, ``k``, ``m`` and ``g``. Input with an
    unknown unit letter converts to 0.
    """

    BYTE = "b"
    K_BYTE = "k"
    M_BYTE = "m"
    G_BYTE = "g"

    UNITS: Dict[str, int] = {
        BYTE: 1,
        K_BYTE: 1000,
        M_BYTE: 1000000,
        G_BYTE: 1000000000,
    }

    def get_bytes(self, value: str) -> float:
        return self._compute(value, self.BYTE)

    def get_kbytes(self, value: str) -> float:
        return self._compute(value, self.K_BYTE)

    def get_mbytes(self, value: str) -> float:
        return self._compute(value, self.M_BYTE)

    def get_gbytes(self, value: str) -> float:
        return self._compute(value, self.G_BYTE)

    def _compute(self, value: str, unit_out: str) -> float:
        value = value.strip()
        if not value:
            return 0.0

        unit_in = value[-1].lower()
        number = value[:-1].strip()
        if unit_in not in self.UNITS or not number.isdigit():
            return 0.0

        return (int(number) * self.UNITS[unit_in]) / self.UNITS[unit_out]
