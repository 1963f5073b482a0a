# acs_bridge/services/snapshot_tree.py
"""
Navegação no snapshot de dispositivo retornado pelo GenieACS.

O snapshot é uma árvore de dicts: parâmetros terminais carregam `_value`
(e opcionalmente `_type`, `_timestamp`, `_writable`), objetos carregam
`_object`. Alguns firmwares omitem o `_value` e publicam o valor cru, por
isso a verificação de existência é tolerante.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from acs_bridge.services.path_catalog import DataModel, TR098, TR181

# Metadados que não indicam, sozinhos, que o parâmetro foi reportado
METADATA_FIELDS = ("_timestamp", "_type")


@dataclass(frozen=True)
class Leaf:
    """Parâmetro terminal. wrapped=False quando o valor veio cru (sem `_value`)."""
    value: Any
    type: Optional[str] = None
    timestamp: Optional[str] = None
    wrapped: bool = True


@dataclass(frozen=True)
class ObjectNode:
    """Nó contêiner (objeto TR-069 ou dict sem `_value`)."""
    fields: Mapping[str, Any]

    @property
    def marked(self) -> bool:
        return "_object" in self.fields

    def has_content(self) -> bool:
        return any(
            value is not None
            for key, value in self.fields.items()
            if key not in METADATA_FIELDS
        )


TreeNode = Union[Leaf, ObjectNode]


def node_at(snapshot: Any, path: str) -> Optional[TreeNode]:
    """
    Percorre o snapshot segmento a segmento.

    Retorna None se o snapshot não existir, se algum segmento faltar, se
    um nó intermediário não for dict ou se o nó final for nulo.
    """
    if not isinstance(snapshot, Mapping) or not path:
        return None

    current: Any = snapshot
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return None
        current = current[segment]

    if current is None:
        return None
    if isinstance(current, Mapping):
        if "_value" in current:
            return Leaf(
                value=current.get("_value"),
                type=current.get("_type"),
                timestamp=current.get("_timestamp"),
            )
        return ObjectNode(fields=current)
    return Leaf(value=current, wrapped=False)


def exists(snapshot: Any, path: str) -> bool:
    """Indica se o caminho aponta para um parâmetro/objeto populado."""
    node = node_at(snapshot, path)
    if node is None:
        return False
    if isinstance(node, Leaf):
        return True
    return node.marked or node.has_content()


def get_value(snapshot: Any, path: str, default: Any = None) -> Any:
    """
    Lê o valor de um parâmetro: `_value` do nó ou o valor cru.
    Objetos (sem `_value`) não têm valor.
    """
    node = node_at(snapshot, path)
    if isinstance(node, Leaf) and node.value is not None:
        return node.value
    return default


def first_value(snapshot: Any, paths: Iterable[str], default: Any = None) -> Any:
    """Tenta os caminhos em ordem; o primeiro valor não-nulo vence."""
    for path in paths:
        value = get_value(snapshot, path)
        if value is not None:
            return value
    return default


def has_any_field(snapshot: Any, path: str, fields: Iterable[str]) -> bool:
    """Verifica se o objeto no caminho tem algum dos campos informados não-nulo."""
    node = node_at(snapshot, path)
    if not isinstance(node, ObjectNode):
        return False
    return any(node.fields.get(f) is not None for f in fields)


# =============================================================================
# DATA MODEL
# =============================================================================
@dataclass(frozen=True)
class DialectHints:
    """Raízes de data model presentes no snapshot."""
    is_tr098: bool
    is_tr181: bool

    def allows(self, model: DataModel) -> bool:
        # Snapshot sem nenhuma das raízes: não há como decidir, oferece ambos
        if not (self.is_tr098 or self.is_tr181):
            return True
        if model == TR098:
            return self.is_tr098
        if model == TR181:
            return self.is_tr181
        return False


def detect_dialects(snapshot: Any) -> Optional[DialectHints]:
    """
    Detecta TR-098 (`InternetGatewayDevice`) e TR-181 (`Device`) pela raiz.
    Retorna None quando não há snapshot (modo otimista).
    """
    if snapshot is None:
        return None
    if not isinstance(snapshot, Mapping):
        return DialectHints(is_tr098=False, is_tr181=False)
    return DialectHints(
        is_tr098=snapshot.get("InternetGatewayDevice") is not None,
        is_tr181=snapshot.get("Device") is not None,
    )
