# Copyright (C) 2009 Robert Collins <robertc@robertcollins.net>
# Copyright (C) 2009 Canonical Ltd
# Copyright (C) 2009 Duncan McGreggor <oubiwann@adytum.us>
# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

"""
Records decoded from EC2 responses.

All records are immutable and compare by value, field by field.  Optional
fields distinguish an element which was present but empty (C{None}) from an
element which was not in the response at all (L{MISSING}).
"""

import attr

from constantly import Names, NamedConstant


__all__ = [
    "MISSING", "SecurityGroup", "GroupPermission", "IPPermission",
    "Keypair", "Address", "AvailabilityZone",
]


class FieldValue(Names):
    """
    Markers for optional record fields.
    """
    MISSING = NamedConstant()


MISSING = FieldValue.MISSING


@attr.s(frozen=True)
class GroupPermission(object):
    """
    Ingress granted to the members of another security group.

    @ivar owner: The account id owning the other group.
    @ivar group: The name of the other group.
    """
    owner = attr.ib(default=None)
    group = attr.ib(default=None)


@attr.s(frozen=True)
class IPPermission(object):
    """
    Ingress granted to a CIDR range.

    Ports are kept as the provider reported them; ICMP rules carry the ICMP
    type and code in C{from_port} and C{to_port}.
    """
    protocol = attr.ib(default=None)
    from_port = attr.ib(default=None)
    to_port = attr.ib(default=None)
    cidr_ips = attr.ib(default=None)


@attr.s(frozen=True)
class SecurityGroup(object):
    """An EC2 security group.

    @ivar aws_owner: The account id of the owner of this security group.
    @ivar aws_group_name: The name of the security group.
    @ivar aws_description: The description of this security group.
    @ivar aws_perms: A C{list} of L{GroupPermission} and L{IPPermission}
        instances, without duplicates, in the order the provider listed them.
    """
    aws_owner = attr.ib(default=None)
    aws_group_name = attr.ib(default=None)
    aws_description = attr.ib(default=None)
    aws_perms = attr.ib(default=attr.Factory(list))


@attr.s(frozen=True)
class Keypair(object):
    """A key pair; C{aws_material} is only sent when the key is created."""
    aws_key_name = attr.ib(default=None)
    aws_fingerprint = attr.ib(default=None)
    aws_material = attr.ib(default=MISSING)


@attr.s(frozen=True)
class Address(object):
    """
    An elastic IP address.  C{instance_id} is C{None} if the address is not
    associated with an instance.
    """
    public_ip = attr.ib(default=None)
    instance_id = attr.ib(default=MISSING)


@attr.s(frozen=True)
class AvailabilityZone(object):
    zone_name = attr.ib(default=None)
    zone_state = attr.ib(default=None)
    region_name = attr.ib(default=MISSING)
