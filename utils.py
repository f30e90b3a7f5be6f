import logging
import math
from datetime import datetime, date, tzinfo
from typing import List, Type, TypeVar, Union
import pytz
from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

def dict_to_model(model_cls: Type[T], data: dict) -> T:
    valid_keys = set(model_cls.model_fields.keys())
    filtered = {k: v for k, v in data.items() if k in valid_keys}
    return model_cls.model_validate(filtered)

def dicts_to_models(model_cls: Type[T], items: list) -> List[T]:
    return [dict_to_model(model_cls, item) for item in items]

def get_timezone(tz: Union[str, tzinfo, None]):
    if tz is None:
        return pytz.utc
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz

def local_date(timestamp: int, tz) -> date:
    return datetime.fromtimestamp(timestamp, tz=get_timezone(tz)).date()

def round_half_up(value: float, digits: int = 0) -> float:
    # Python's round() is banker's rounding; the dashboard rounds .5 up
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor

def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )
