"""Сериализация растров в контейнеры ICO, ICNS и PNG.

Принципы:
- Единый интерфейс `ArtifactEncoder.encode(bitmaps) -> bytes`: оркестратор не ветвится по форматам.
- Несовпадение размеров = внутренняя ошибка (`EncodingInvariantError`), байты не возвращаются.
"""
from __future__ import annotations

import io
import struct
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Tuple

import numpy as np
from PIL import Image

from icongen.errors import EncodingInvariantError
from icongen.models.icon_model import ContainerKind
from icongen.models.size_tables import ICNS_SIZES, ICNS_SLOTS, ICO_SIZES

ICO_PNG_THRESHOLD = 256  # кадры от этого размера хранятся как PNG


def encode_png(image: Image.Image) -> bytes:
    """PNG без потерь, альфа-канал сохраняется как есть."""
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    buf = io.BytesIO()
    rgba.save(buf, format="PNG")
    return buf.getvalue()


class ArtifactEncoder(ABC):
    """Энкодер одного артефакта из набора растров, индексированных стороной в px."""

    kind: str = ""

    @property
    @abstractmethod
    def required_sizes(self) -> Tuple[int, ...]:
        ...

    @abstractmethod
    def _encode(self, bitmaps: Mapping[int, Image.Image]) -> bytes:
        ...

    def encode(self, bitmaps: Mapping[int, Image.Image]) -> bytes:
        self._check(bitmaps)
        return self._encode(bitmaps)

    def _check(self, bitmaps: Mapping[int, Image.Image]) -> None:
        for size in self.required_sizes:
            image = bitmaps.get(size)
            if image is None:
                raise EncodingInvariantError(f"{self.kind}: нет растра {size}x{size}", size=size, stage="encode")
            if image.size != (size, size):
                raise EncodingInvariantError(
                    f"{self.kind}: слот {size}x{size} получил растр {image.width}x{image.height}",
                    size=size,
                    stage="encode",
                )


class PngEncoder(ArtifactEncoder):
    kind = "png"

    def __init__(self, size: int) -> None:
        self._size = size

    @property
    def required_sizes(self) -> Tuple[int, ...]:
        return (self._size,)

    def _encode(self, bitmaps: Mapping[int, Image.Image]) -> bytes:
        return encode_png(bitmaps[self._size])


class IcoEncoder(ArtifactEncoder):
    """
    ICO: ICONDIR (6 байт) + ICONDIRENTRY (16 байт на кадр) + данные кадров.
    Кадры меньше 256 px: 32-битный DIB (BGRA снизу вверх + 1-битная AND-маска),
    256 px: встроенный PNG.
    """
    kind = "ico"

    @property
    def required_sizes(self) -> Tuple[int, ...]:
        return ICO_SIZES

    def _dib_frame(self, image: Image.Image) -> bytes:
        arr = np.asarray(image.convert("RGBA"), dtype=np.uint8)
        h, w = arr.shape[:2]
        # XOR-часть: BGRA, строки снизу вверх
        xor = arr[::-1, :, [2, 1, 0, 3]].tobytes()
        # AND-маска: 1 бит на пиксель, строка выровнена до 4 байт, 1 = прозрачный
        stride = ((w + 31) // 32) * 4
        bits = np.packbits(arr[::-1, :, 3] == 0, axis=1)
        mask = np.zeros((h, stride), dtype=np.uint8)
        mask[:, : bits.shape[1]] = bits
        header = struct.pack(
            "<IiiHHIIiiII",
            40,  # biSize
            w,
            h * 2,  # XOR + AND
            1,  # planes
            32,  # bit count
            0,  # BI_RGB
            len(xor) + mask.size,
            0,
            0,
            0,
            0,
        )
        return header + xor + mask.tobytes()

    def _encode(self, bitmaps: Mapping[int, Image.Image]) -> bytes:
        frames = []
        for size in self.required_sizes:
            image = bitmaps[size]
            if size >= ICO_PNG_THRESHOLD:
                frames.append((size, encode_png(image)))
            else:
                frames.append((size, self._dib_frame(image)))

        out = bytearray(struct.pack("<HHH", 0, 1, len(frames)))
        offset = 6 + 16 * len(frames)
        for size, data in frames:
            dim = size if size < 256 else 0  # 0 означает 256
            out += struct.pack("<BBBBHHII", dim, dim, 0, 0, 1, 32, len(data), offset)
            offset += len(data)
        for _, data in frames:
            out += data
        return bytes(out)


class IcnsEncoder(ArtifactEncoder):
    """
    ICNS: "icns" + длина файла (big-endian), затем записи OSType + длина + PNG.
    """
    kind = "icns"

    @property
    def required_sizes(self) -> Tuple[int, ...]:
        return ICNS_SIZES

    def _encode(self, bitmaps: Mapping[int, Image.Image]) -> bytes:
        png_cache: Dict[int, bytes] = {}
        body = bytearray()
        for ostype, size in ICNS_SLOTS:
            if size not in png_cache:
                png_cache[size] = encode_png(bitmaps[size])
            data = png_cache[size]
            body += ostype.encode("ascii")
            body += struct.pack(">I", 8 + len(data))
            body += data
        return b"icns" + struct.pack(">I", 8 + len(body)) + bytes(body)


def encoder_for(kind: ContainerKind) -> ArtifactEncoder:
    if kind is ContainerKind.ICO:
        return IcoEncoder()
    if kind is ContainerKind.ICNS:
        return IcnsEncoder()
    raise EncodingInvariantError(f"Неизвестный контейнер: {kind}", stage="encode")
