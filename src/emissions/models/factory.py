# src/emissions/models/factory.py
import logging
from typing import Callable, Dict

from emissions.models.base import CarbonModel
from emissions.models.one_byte import OneByteModel
from emissions.models.sustainable_web_design import SustainableWebDesignV3, SustainableWebDesignV4
from website_carbon.errors import ConfigurationError

logger = logging.getLogger(__name__)

# 'swd' always points at the latest Sustainable Web Design version
MODEL_REGISTRY: Dict[str, Callable[[], CarbonModel]] = {
    "swd": SustainableWebDesignV4,
    "swd4": SustainableWebDesignV4,
    "swd3": SustainableWebDesignV3,
    "1byte": OneByteModel,
}


def build_model(model_name: str) -> CarbonModel:
    try:
        factory = MODEL_REGISTRY[model_name]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported carbon model '{model_name}'. Choose one of: {', '.join(MODEL_REGISTRY)}"
        ) from None
    model = factory()
    logger.debug("Built carbon model %r for '%s'.", model, model_name)
    return model
