from enum import Enum
from datetime import datetime, date
from dataclasses import fields


def to_dict(record, exclude=()):
    output = {}

    for field in fields(record):
        key = field.name
        if key in exclude:
            continue
        value = getattr(record, key)

        if isinstance(value, Enum):
            output[key] = value.value
        elif isinstance(value, (datetime, date)):
            output[key] = value.isoformat()
        else:
            output[key] = value

    return output
