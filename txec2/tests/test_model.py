# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

import attr

from twisted.trial.unittest import TestCase

from txec2.model import (
    MISSING, Address, AvailabilityZone, GroupPermission, IPPermission,
    Keypair, SecurityGroup)


class ModelTestCase(TestCase):

    def test_value_equality(self):
        self.assertEqual(
            IPPermission("tcp", "22", "22", "0.0.0.0/0"),
            IPPermission(
                cidr_ips="0.0.0.0/0", to_port="22", from_port="22",
                protocol="tcp"))
        self.assertNotEqual(
            GroupPermission("1", "default"), GroupPermission("1", "other"))

    def test_immutable(self):
        keypair = Keypair("k", "f")
        self.assertRaises(
            attr.exceptions.FrozenInstanceError,
            setattr, keypair, "aws_key_name", "j")

    def test_missing_defaults(self):
        self.assertIs(MISSING, Keypair().aws_material)
        self.assertIs(MISSING, Address().instance_id)
        self.assertIs(MISSING, AvailabilityZone().region_name)

    def test_missing_distinct_from_none(self):
        self.assertNotEqual(Address("1.2.3.4", None), Address("1.2.3.4"))

    def test_group_permissions(self):
        group = SecurityGroup("owner", "web", "Web")
        self.assertEqual([], group.aws_perms)
        self.assertIsNot(group.aws_perms, SecurityGroup().aws_perms)
