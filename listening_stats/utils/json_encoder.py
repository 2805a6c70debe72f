"""Custom JSON encoding utilities"""
import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime

class StatsEncoder(json.JSONEncoder):
    """JSON encoder that handles datetimes, sets and dataclasses"""
    def default(self, obj):
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        if is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)
        return super().default(obj)

def json_dumps(obj, **kwargs):
    """Helper function to dump JSON with set and datetime handling"""
    return json.dumps(obj, cls=StatsEncoder, **kwargs)
