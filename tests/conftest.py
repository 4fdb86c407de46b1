import pytest

from leafsim.airlayer import AirLayer
from leafsim.canopylayer import CanopyLayer
from leafsim.planthydraulics import LeafHydraulics, WholePlantHydraulics


@pytest.fixture
def envir():
    return AirLayer()


@pytest.fixture
def canopy():
    return CanopyLayer()


@pytest.fixture
def leaf_hs():
    return LeafHydraulics()


@pytest.fixture
def plant_hs():
    return WholePlantHydraulics()
