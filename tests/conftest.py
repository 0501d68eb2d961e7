import logging
import os

import pytest

from fixedstruct import field, field_seq


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)


@pytest.fixture
def person_fields():
    '''name, age padded with zeros and height right justified'''
    return field_seq(
        field(0, 6).named('name'),
        field(6, 9).named('age').padded('0'),
        field(9, 11).named('height').justified('right'),
    )
