"""Static client and task lists shown in the entry form."""
from schemas import LookupItem

CLIENTS: list[LookupItem] = [
    LookupItem(id=f"client-{index}", name=name)
    for index, name in enumerate(
        [
            "Analog Devices",
            "Appnomics",
            "Aura Semi",
            "BMC",
            "BRCD",
            "BSTZ - IPO",
            "BSTZ - Searches",
            "Cradle",
            "CHSY",
            "DELL",
            "EMC",
            "Firm Internal",
            "Gainspan",
            "HPBB (HPTB)",
            "ILAB",
            "Intel - IPO",
            "Intel - Appli",
            "ITGY",
            "JWTH",
            "MYEL",
            "NAVI",
            "NFLX",
            "NIMO",
            "Nutanix - Appli",
            "Nutanix - Searches",
            "NWE",
            "OFIN",
            "Oracle - Appli",
            "Oracle - IPO",
            "Oracle - Searches",
            "Oracle - COCs",
            "OSTN",
            "PCOI",
            "PLBR",
            "SLWP",
            "SMRT",
            "SOLI",
            "SPCT",
            "SVPG",
            "Tekelec - IPO",
            "TOTE",
            "VMW",
            "WBD",
            "WDC - Searches",
            "WILM",
            "FOLY - Searches",
        ],
        start=1,
    )
]

TASKS: list[LookupItem] = [
    LookupItem(id=f"task-{index}", name=name)
    for index, name in enumerate(
        [
            "Specification Drafting",
            "USPTO - Preparation of responses",
            "USPTO - Compliance",
            "USPTO - Misc",
            "IPO - Permissions",
            "IPO - New Filings",
            "IPO - Preparation of responses",
            "IPO - Compliance",
            "IPO - Appeals",
            "IPO - Misc",
            "Other - Filing",
            "Other - Preparation of responses",
            "Pre-filing Patentability",
            "Invalidity Searches",
            "Infringement Searches",
            "Landscape Studies",
            "Legal",
            "Courts",
            "Firm - Internal",
        ],
        start=1,
    )
]

_CLIENT_NAMES = {item.id: item.name for item in CLIENTS}
_TASK_NAMES = {item.id: item.name for item in TASKS}


def client_name(client_id: str) -> str:
    """Display name for a client id; unknown ids are shown as-is."""
    return _CLIENT_NAMES.get(client_id, client_id)


def task_name(task_id: str) -> str:
    return _TASK_NAMES.get(task_id, task_id)
