import pytest

from polysolid.config import SolidSettings, set_settings
from polysolid.entities import Model
from polysolid.primitives import add_box, box_group


@pytest.fixture(autouse=True)
def _default_settings():
    old = set_settings(SolidSettings())
    yield
    set_settings(old)


@pytest.fixture
def model():
    return Model()


@pytest.fixture
def make_box(model):
    """Build an axis aligned box group in the model's top level entities."""

    def _make(corner0, corner1, name='', material=None, layer=None):
        return box_group(model.entities, corner0, corner1, name=name,
                         material=material, layer=layer)

    return _make


@pytest.fixture
def make_component(model):
    """Build a component definition holding a box, plus a placer for it."""

    def _make(corner0, corner1, name='Cube'):
        definition = model.add_definition(name)
        add_box(definition.entities, corner0, corner1)
        return definition

    return _make


def face_count(container):
    return len(container.entities.faces)
