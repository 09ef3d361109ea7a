# -*- coding: utf-8 -*-
"""
seguimiento_ots/services/stage_catalog.py

Catálogo fixo de etapas por pipeline (INCO e ANTI).
Cada etapa tem um peso de progresso; a ordem da lista é a ordem do fluxo.
Expõe:
- index_of(pipeline, nome)   → posição da etapa no pipeline ou None.
- stages_for(location)       → etapas da localização (vazio para ARCHIVED).
- progress_for(status)       → peso da etapa em INCO ∪ ANTI (0 se vazio).
- is_known_stage(nome)       → True se a etapa existe em algum pipeline.
"""
from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from seguimiento_ots.models import ANTI, ARCHIVED, INCO


class Stage(NamedTuple):
    name: str
    progress: int


INCO_STAGES: Tuple[Stage, ...] = (
    Stage("Corte", 15),
    Stage("Armado", 30),
    Stage("Soldadura", 50),
    Stage("Mecanizado", 65),
    Stage("Control Calidad", 85),
    Stage("Anticorr", 100),
)

ANTI_STAGES: Tuple[Stage, ...] = (
    Stage("Recepción", 10),
    Stage("Arenado", 30),
    Stage("Pintura", 55),
    Stage("Secado", 70),
    Stage("Inspección", 85),
    Stage("Despacho", 100),
)

# Etapas cuja data move a OT para a próxima localização
HANDOFF_STAGES: Dict[str, str] = {
    INCO: "Anticorr",
    ANTI: "Despacho",
}

_BY_LOCATION: Dict[str, Tuple[Stage, ...]] = {
    INCO: INCO_STAGES,
    ANTI: ANTI_STAGES,
    ARCHIVED: (),
}

_PROGRESS: Dict[str, int] = {s.name: s.progress for s in INCO_STAGES + ANTI_STAGES}


def stages_for(location: str) -> Tuple[Stage, ...]:
    return _BY_LOCATION.get(location, ())


def index_of(pipeline: Sequence[Stage], stage_name: str) -> Optional[int]:
    """Busca linear da etapa no pipeline; None se não existir."""
    for i, stage in enumerate(pipeline):
        if stage.name == stage_name:
            return i
    return None


def progress_for(status: str) -> int:
    if not status:
        return 0
    return _PROGRESS[status]


def is_known_stage(stage_name: str) -> bool:
    return stage_name in _PROGRESS


def catalog_as_dict() -> Dict[str, List[dict]]:
    return {
        INCO: [s._asdict() for s in INCO_STAGES],
        ANTI: [s._asdict() for s in ANTI_STAGES],
    }


__all__ = [
    "Stage",
    "INCO_STAGES",
    "ANTI_STAGES",
    "HANDOFF_STAGES",
    "stages_for",
    "index_of",
    "progress_for",
    "is_known_stage",
    "catalog_as_dict",
]
