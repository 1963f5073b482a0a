from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from acs_bridge.database.models import Base  # noqa: E402

WLAN_1 = "InternetGatewayDevice.LANDevice.1.WLANConfiguration.1"
PPP_1 = "InternetGatewayDevice.WANDevice.1.WANConnectionDevice.1.WANPPPConnection.1"


def _v(value: Any, xsd: str = "xsd:string") -> Dict[str, Any]:
    return {"_value": value, "_type": xsd, "_timestamp": "2024-05-01T12:00:00.000Z"}


@pytest.fixture()
def tr098_snapshot() -> Dict[str, Any]:
    """ONU EPON TR-098 com uma conexão PPPoE e uma WLAN."""
    return {
        "_id": "F86CE1-AN5506-FHTT00ABC123",
        "_lastInform": "2024-05-01T12:00:00.000Z",
        "_deviceId": {
            "_SerialNumber": "FHTT00ABC123",
            "_OUI": "F86CE1",
            "_Manufacturer": "FiberHome",
            "_ProductClass": "AN5506",
        },
        "InternetGatewayDevice": {
            "DeviceInfo": {
                "SoftwareVersion": _v("RP2613"),
                "HardwareVersion": _v("WKE2.094.277A01"),
                "UpTime": _v(3600, "xsd:unsignedInt"),
            },
            "ManagementServer": {
                "ConnectionRequestURL": _v("http://100.64.10.20:7547/tr069"),
            },
            "LANDevice": {
                "1": {
                    "WLANConfiguration": {
                        "1": {
                            "_object": True,
                            "Enable": _v(True, "xsd:boolean"),
                            "SSID": _v("Casa"),
                            "BeaconType": _v("11i"),
                            "KeyPassphrase": _v("senha-antiga"),
                            "WPAAuthenticationMode": _v("PSKAuthentication"),
                            "WPAEncryptionModes": _v("AESEncryption"),
                        },
                    },
                },
            },
            "WANDevice": {
                "1": {
                    "WANConnectionDevice": {
                        "1": {
                            "WANPPPConnection": {
                                "1": {
                                    "_object": True,
                                    "Name": _v("INTERNET_R_VID_100"),
                                    "ConnectionStatus": _v("Connected"),
                                    "ConnectionType": _v("IP_Routed"),
                                    "ExternalIPAddress": _v("100.64.10.20"),
                                    "RemoteIPAddress": _v("100.64.0.1"),
                                    "Username": _v("cliente@isp"),
                                    "MaxMRUSize": _v(1492, "xsd:unsignedInt"),
                                    "X_CT-COM_LanInterface": _v(
                                        "InternetGatewayDevice.LANDevice.1.LANEthernetInterfaceConfig.1"
                                    ),
                                },
                            },
                        },
                    },
                    "X_CT-COM_EponInterfaceConfig": {
                        "RXPower": _v(2150, "xsd:unsignedInt"),
                        "TransceiverTemperature": _v(12800, "xsd:unsignedInt"),
                    },
                },
            },
        },
    }


@pytest.fixture()
def tr181_snapshot() -> Dict[str, Any]:
    """Roteador TR-181 que só reportou o SSID."""
    return {
        "_id": "00259E-HG8145V5-48575443ABCDEF01",
        "Device": {
            "WiFi": {
                "SSID": {
                    "1": {"SSID": _v("Escritorio")},
                },
            },
        },
    }


@pytest.fixture()
def bridge_snapshot() -> Dict[str, Any]:
    """Sem conexões WAN; duas WLANs ativas em VLANs diferentes."""
    return {
        "InternetGatewayDevice": {
            "LANDevice": {
                "1": {
                    "WLANConfiguration": {
                        "1": {
                            "Enable": _v(True, "xsd:boolean"),
                            "SSID": _v("Casa"),
                            "X_CT-COM_VLAN": _v(10, "xsd:unsignedInt"),
                        },
                        "2": {
                            "Enable": _v(True, "xsd:boolean"),
                            "SSID": _v("Visitantes"),
                            "X_CT-COM_VLAN": _v(20, "xsd:unsignedInt"),
                        },
                    },
                },
            },
        },
    }


@pytest.fixture()
def db_session() -> Iterator[Session]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
