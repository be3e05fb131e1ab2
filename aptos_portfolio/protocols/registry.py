"""Registered protocols, in the order they appear in every portfolio."""
from __future__ import annotations

from . import (
    aave,
    amnis,
    aries,
    auro,
    earnium,
    echelon,
    echo,
    hyperion,
    joule,
    meso,
    moar,
    tapp,
    thala,
)
from .base import ProtocolSpec

REGISTRY: dict[str, ProtocolSpec] = {
    spec.key: spec
    for spec in (
        echelon.SPEC,
        joule.SPEC,
        aries.SPEC,
        meso.SPEC,
        echo.SPEC,
        hyperion.SPEC,
        tapp.SPEC,
        thala.SPEC,
        amnis.SPEC,
        auro.SPEC,
        earnium.SPEC,
        aave.SPEC,
        moar.SPEC,
    )
}


def get_spec(key: str) -> ProtocolSpec:
    try:
        return REGISTRY[key]
    except KeyError:
        raise ValueError(f"Unknown protocol '{key}'") from None
