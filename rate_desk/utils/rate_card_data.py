"""
Rate Desk - Backup Rate Card
Built-in table used when no remote or local source can be loaded.
"""

from rate_desk.utils.models import RateTable, RoleRecord

BACKUP_RATE_CARD = [
    {'role': 'Salesforce Solution Architect', 'clientRate': 190.0,
     'onshore': {'cost': 100.0}, 'offshore': {'cost': 34.0}, 'nearshore': {'cost': 47.0}},
    {'role': 'Marketing Cloud Specialist', 'clientRate': 190.0,
     'onshore': {'cost': 66.0}, 'offshore': {'cost': 9.0}, 'nearshore': {'cost': 32.0}},
    {'role': 'Commerce Cloud Administrator', 'clientRate': 160.0,
     'onshore': {'cost': 69.0}, 'offshore': {'cost': 12.5}, 'nearshore': {'cost': 34.0}},
    {'role': 'Junior Developer', 'clientRate': 140.0,
     'onshore': {'cost': 69.0}, 'offshore': {'cost': 11.0}, 'nearshore': {'cost': 25.0}},
    {'role': 'Release Manager', 'clientRate': 160.0,
     'onshore': {'cost': 99.0}, 'offshore': {'cost': 13.5}, 'nearshore': {'cost': 56.0}},
    {'role': 'Data/Integration Architect', 'clientRate': 190.0,
     'onshore': {'cost': 129.0}, 'offshore': {'cost': 30.0}, 'nearshore': {'cost': 70.0}},
    {'role': 'QA -Quality Assurance', 'clientRate': 18.0,
     'onshore': {'cost': 0}, 'offshore': {'cost': 6.75}, 'nearshore': {'cost': 0}},
]


def backup_rate_table() -> RateTable:
    return RateTable(tuple(
        RoleRecord(
            role=row['role'],
            onshore_cost=float(row['onshore']['cost']),
            offshore_cost=float(row['offshore']['cost']),
            nearshore_cost=float(row['nearshore']['cost']),
            client_rate=float(row['clientRate']),
        )
        for row in BACKUP_RATE_CARD
    ))
