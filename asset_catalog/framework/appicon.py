from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IconSlot:
    idiom: str
    scale: int
    size: float


APP_ICON_SLOTS: tuple[IconSlot, ...] = (
    IconSlot("iphone", 2, 29),
    IconSlot("iphone", 3, 29),
    IconSlot("iphone", 2, 40),
    IconSlot("iphone", 3, 40),
    IconSlot("iphone", 2, 60),
    IconSlot("iphone", 3, 60),
    IconSlot("ipad", 1, 29),
    IconSlot("ipad", 2, 29),
    IconSlot("ipad", 1, 40),
    IconSlot("ipad", 2, 40),
    IconSlot("ipad", 1, 76),
    IconSlot("ipad", 2, 76),
    IconSlot("ipad", 2, 83.5),
)
