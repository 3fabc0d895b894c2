# -*- coding: utf-8 -*-
import pytest
from taquilla.modules.payments.enums import GatewayEnvironment


def test_gateway_environment_values_lowercase():
    assert GatewayEnvironment.PRODUCTION.value == "production"
    assert GatewayEnvironment.TEST.value == "test"
    for e in GatewayEnvironment:
        assert e.value == e.value.lower()


@pytest.mark.parametrize(
    "env, is_production, label",
    [
        (GatewayEnvironment.PRODUCTION, True, "PRODUCCIÓN"),
        (GatewayEnvironment.TEST, False, "PRUEBAS"),
    ],
)
def test_gateway_environment_flags_and_labels(env, is_production, label):
    assert env.is_production is is_production
    assert env.label == label
# Fin del archivo
