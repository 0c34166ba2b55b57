"""Shared BDD steps for the bag: guest sessions and adding drafts."""

from decimal import Decimal

import pytest
from pytest_bdd import given, parsers, then, when


@pytest.fixture()
def shopper():
    return {}


@given(parsers.cfparse('a guest shopper on device "{device_id}"'))
def guest_shopper(make_session, shopper, device_id):
    shopper["session"] = make_session(device_id)


@given(
    parsers.cfparse(
        'the shopper adds "{design_id}" as ClothOnly with fabric "{fabric_id}" in "{color_id}" for {length} meters'
    )
)
@when(
    parsers.cfparse(
        'the shopper adds "{design_id}" as ClothOnly with fabric "{fabric_id}" in "{color_id}" for {length} meters'
    )
)
def add_cloth_draft(shopper, design_id, fabric_id, color_id, length):
    selections = {"fabric_id": fabric_id, "color_id": color_id, "length_m": Decimal(length)}
    shopper["draft"] = shopper["session"].reconciler.add_draft("ClothOnly", design_id, selections)


@given(parsers.cfparse('the shopper signs in as "{user_id}"'))
@when(parsers.cfparse('the shopper signs in as "{user_id}"'))
def sign_in(shopper, user_id):
    shopper["session"].sign_in(user_id)


@then(parsers.cfparse("the bag line is priced at {rupees:d} rupees"))
def bag_line_priced_at(shopper, rupees):
    [priced] = shopper["session"].reconciler.list_drafts()
    assert priced.unit_price.rupees == Decimal(rupees)


@then(parsers.cfparse("the bag holds {count:d} drafts"))
@then(parsers.cfparse("the bag holds {count:d} draft"))
def bag_holds(shopper, count):
    assert len(shopper["session"].reconciler.list_drafts()) == count
