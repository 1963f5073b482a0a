# acs_bridge/database/models.py
# Modelos SQLAlchemy das tabelas do operador (somente leitura pela bridge)

from sqlalchemy import Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class MapItem(Base):
    """
    Item da topologia (mapa da rede): ONU, CTO, POP...
    Vinculado ao dispositivo do GenieACS por genieacs_device_id.
    """
    __tablename__ = "map_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255))
    item_type = Column(String(50))  # onu, odp, olt...
    status = Column(String(50))
    latitude = Column(Float)
    longitude = Column(Float)
    genieacs_device_id = Column(String(255), index=True)  # _id do GenieACS

    onu_configs = relationship("OnuConfig", back_populates="map_item")

    def __repr__(self):
        return f"<MapItem {self.id} {self.name} ({self.item_type})>"


class OnuConfig(Base):
    """
    Atribuição da ONU ao cliente.
    Registros legados podem existir apenas aqui, sem map_item.
    """
    __tablename__ = "onu_config"

    id = Column(Integer, primary_key=True, autoincrement=True)
    map_item_id = Column(Integer, ForeignKey("map_items.id", ondelete="SET NULL"), nullable=True)
    customer_name = Column(String(255))
    odp_port = Column(String(50))
    genieacs_device_id = Column(String(255), index=True)

    map_item = relationship("MapItem", back_populates="onu_configs")

    def __repr__(self):
        return f"<OnuConfig {self.id} cliente={self.customer_name}>"
