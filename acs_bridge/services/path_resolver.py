# acs_bridge/services/path_resolver.py
# Seleção dos caminhos a escrever com base no que o dispositivo reportou

from typing import Any, Iterable, List, Optional
import logging

from acs_bridge.services.snapshot_tree import exists

logger = logging.getLogger(__name__)


def _dedupe(paths: Iterable[str]) -> List[str]:
    seen = set()
    result: List[str] = []
    for path in paths:
        if path not in seen:
            seen.add(path)
            result.append(path)
    return result


def resolve(
    candidates: Iterable[str],
    fallback: Iterable[str] = (),
    snapshot: Optional[Any] = None,
) -> List[str]:
    """
    Resolve a lista ordenada de caminhos concretos para escrita.

    - Sem snapshot: união de candidatos + fallback, sem duplicatas
      (escreve tudo que for plausível).
    - Com snapshot: apenas os candidatos que existem, na ordem declarada.
      Se nenhum existir, usa o fallback para garantir ao menos uma tentativa.
    """
    candidates = list(candidates)
    fallback = list(fallback)

    if snapshot is None:
        return _dedupe(candidates + fallback)

    available = [path for path in candidates if exists(snapshot, path)]
    if available:
        return available

    logger.debug(f"[PathResolver] nenhum candidato encontrado, usando fallback: {fallback}")
    return _dedupe(fallback)
