"""LangChain tools that proxy free public APIs (weather, SpaceX, countries).

These tools never raise: any network or response-shape problem is folded
into an apologetic result string for the model to relay.
"""

from __future__ import annotations

import logging
from datetime import datetime
from urllib.parse import quote

from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, Field

from agenda.services.http_client import PublicAPIClient, RemoteCallError

logger = logging.getLogger(__name__)

WTTR_URL = "https://wttr.in"
SPACEX_UPCOMING_URL = "https://api.spacexdata.com/v4/launches/upcoming"
RESTCOUNTRIES_URL = "https://restcountries.com/v3.1/name"

_SHAPE_ERRORS = (KeyError, IndexError, TypeError, ValueError)


class WeatherArgs(BaseModel):
    city: str = Field(..., description="Nome da cidade")


class CountryArgs(BaseModel):
    country: str = Field(..., description="Nome do país")


class NoArgs(BaseModel):
    pass


def _format_population(value: int) -> str:
    """12345678 → '12.345.678'."""
    return f"{int(value):,}".replace(",", ".")


def build_public_info_tools(client: PublicAPIClient) -> list[BaseTool]:
    """Create the public-info tools sharing one HTTP *client*."""

    @tool("getWeather", args_schema=WeatherArgs)
    def get_weather(city: str) -> str:
        """Obtém a previsão do tempo para uma cidade."""
        logger.info("Fetching weather for %s", city)
        try:
            condition = client.get_text(f"{WTTR_URL}/{quote(city)}", params={"format": "%C %t"})
        except RemoteCallError as e:
            logger.error("Weather lookup failed for %s: %s", city, e)
            return f"Não consegui obter o clima de {city}. Tente novamente!"
        return f"O clima em {city} é {condition.strip()}."

    @tool("getNextLaunchSpaceX", args_schema=NoArgs)
    def get_next_launch() -> str:
        """Obtém informações sobre o próximo lançamento da SpaceX."""
        logger.info("Fetching next SpaceX launch")
        try:
            launches = client.get_json(SPACEX_UPCOMING_URL)
            launch = launches[0]
            name = launch["name"]
            when = datetime.fromisoformat(launch["date_local"])
        except (RemoteCallError, *_SHAPE_ERRORS) as e:
            logger.error("SpaceX lookup failed: %s", e)
            return "Não consegui informações sobre o próximo lançamento da SpaceX."
        return (
            f"O próximo lançamento da SpaceX será {name} "
            f"em {when.strftime('%d/%m/%Y %H:%M')}."
        )

    @tool("getCountryInfo", args_schema=CountryArgs)
    def get_country_info(country: str) -> str:
        """Obtém informações sobre um país."""
        logger.info("Fetching country info for %s", country)
        try:
            data = client.get_json(f"{RESTCOUNTRIES_URL}/{quote(country)}")
            info = data[0]
            capital = info["capital"][0]
            population = _format_population(info["population"])
        except (RemoteCallError, *_SHAPE_ERRORS) as e:
            logger.error("Country lookup failed for %s: %s", country, e)
            return f"Não encontrei informações sobre {country}. Verifique o nome!"
        return (
            f"{country} tem como capital {capital} e uma população de "
            f"aproximadamente {population} habitantes."
        )

    return [get_weather, get_next_launch, get_country_info]
