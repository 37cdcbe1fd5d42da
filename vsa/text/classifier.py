"""
Technology classifier.

Maps free text onto a fixed taxonomy of technology areas by keyword
containment. Areas are reported in taxonomy order.
"""

from typing import Dict, List

TECHNOLOGY_AREAS: Dict[str, List[str]] = {
    "networking": [
        "router", "switch", "firewall", "vpn", "wan", "lan", "vlan", "bgp",
        "ospf", "dmvpn", "qos", "network", "ethernet", "wifi", "wireless",
    ],
    "security": [
        "firewall", "antivirus", "encryption", "authentication",
        "authorization", "security", "threat", "vulnerability", "compliance",
        "audit",
    ],
    "cloud": [
        "aws", "azure", "gcp", "cloud", "migration", "hybrid", "saas", "paas",
        "iaas", "kubernetes", "docker",
    ],
    "server": [
        "server", "windows", "linux", "unix", "vmware", "hyper-v",
        "virtualization", "datacenter", "storage",
    ],
    "database": [
        "sql", "mysql", "postgresql", "oracle", "mongodb", "database",
        "backup", "recovery", "replication",
    ],
    "email": [
        "exchange", "outlook", "office365", "email", "smtp", "imap", "pop3",
        "calendar", "contacts",
    ],
    "backup": [
        "backup", "recovery", "disaster", "replication", "archive", "restore",
        "veeam", "commvault",
    ],
}


def classify(text: str) -> List[str]:
    """Technology areas whose keywords occur (as substrings) in the text."""
    lower_text = (text or "").lower()
    return [
        area
        for area, keywords in TECHNOLOGY_AREAS.items()
        if any(keyword in lower_text for keyword in keywords)
    ]
