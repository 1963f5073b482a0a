# acs_bridge/services/metadata_service.py
"""
Consulta de metadados do operador para um dispositivo do GenieACS.
Usado apenas para anotar respostas (cliente, porta da CTO, item do mapa).
"""

from typing import Any, Dict, Optional
import logging

from sqlalchemy.orm import Session

from acs_bridge.database.models import MapItem, OnuConfig

log = logging.getLogger("acs-bridge.metadata")


def find_device_metadata(db: Session, device_id: str) -> Optional[Dict[str, Any]]:
    """
    Procura o dispositivo em map_items (com join em onu_config) e, se não
    achar, em registros legados que existem só em onu_config.
    """
    row = (
        db.query(MapItem, OnuConfig)
        .outerjoin(OnuConfig, OnuConfig.map_item_id == MapItem.id)
        .filter(MapItem.genieacs_device_id == device_id)
        .order_by(MapItem.id, OnuConfig.id)
        .first()
    )
    if row is not None:
        item, onu = row
        return {
            "map_item_id": item.id,
            "name": item.name,
            "item_type": item.item_type,
            "status": item.status,
            "latitude": item.latitude,
            "longitude": item.longitude,
            "customer_name": onu.customer_name if onu else None,
            "odp_port": onu.odp_port if onu else None,
            "onu_config_id": onu.id if onu else None,
        }

    legacy = (
        db.query(OnuConfig)
        .filter(OnuConfig.genieacs_device_id == device_id)
        .order_by(OnuConfig.id)
        .first()
    )
    if legacy is not None:
        log.debug(f"[Metadata] {device_id} encontrado apenas em onu_config (legado)")
        return {
            "onu_config_id": legacy.id,
            "map_item_id": legacy.map_item_id,
            "customer_name": legacy.customer_name,
            "odp_port": legacy.odp_port,
        }

    return None
