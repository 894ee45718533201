# Copyright (C) 2009 Robert Collins <robertc@robertcollins.net>
# Copyright (C) 2009 Canonical Ltd
# Copyright (C) 2009 Duncan McGreggor <oubiwann@adytum.us>
# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

"""
Decoders for EC2 response documents.

Each decoder is driven by L{txec2.parser.parse} and recognizes elements by
name and by their path below the document root, since the responses reuse
generic names such as C{item} and C{groupName} at several depths with
unrelated meanings.  Elements a decoder does not know about are ignored.
"""

import attr

from zope.interface import implementer

from constantly import Names, NamedConstant

from txec2 import model
from txec2.exception import MalformedResponseError
from txec2.interface import IResponseDecoder


__all__ = [
    "Field", "TruthDecoder", "RecordDecoder", "RecordListDecoder",
    "ScalarDecoder", "ScalarListDecoder", "SecurityGroupsDecoder",
    "ErrorDecoder",
    "truth_decoder", "describe_key_pairs_decoder", "create_key_pair_decoder",
    "describe_addresses_decoder", "allocate_address_decoder",
    "describe_availability_zones_decoder", "describe_regions_decoder",
    "describe_security_groups_decoder", "error_decoder",
]


def _below_root(path):
    return path[1:]


@attr.s(frozen=True)
class Field(object):
    """
    The record attribute an element's text is stored in.

    @ivar optional: If C{True}, empty text is stored as C{None}.
    """
    attribute = attr.ib()
    optional = attr.ib(default=False)

    def convert(self, text):
        if self.optional and not text:
            return None
        return text


@implementer(IResponseDecoder)
class TruthDecoder(object):
    """
    Decode an acknowledgement: C{True} if the top-level C{return} element
    holds exactly C{"true"}.
    """

    def reset(self):
        self._result = False

    def tag_start(self, name, attributes, path):
        pass

    def tag_end(self, name, text, path):
        if name == "return" and len(path) <= 2:
            self._result = (text == "true")

    def result(self):
        return self._result


@implementer(IResponseDecoder)
class RecordDecoder(object):
    """
    Decode a document holding a single record in the children of its root
    element.

    @ivar record_type: Called with the collected fields as keyword arguments.
    @ivar fields: A C{dict} mapping element names to L{Field}s.
    """

    def __init__(self, record_type, fields):
        self.record_type = record_type
        self.fields = fields

    def reset(self):
        self._record = None
        self._result = None

    def tag_start(self, name, attributes, path):
        if len(path) == 1:
            self._record = {}

    def tag_end(self, name, text, path):
        if len(path) == 1:
            self._result = self.record_type(**self._record)
            self._record = None
        elif len(path) == 2 and name in self.fields:
            field = self.fields[name]
            self._record[field.attribute] = field.convert(text)

    def result(self):
        return self._result


@implementer(IResponseDecoder)
class RecordListDecoder(object):
    """
    Decode a flat list of records.

    @ivar item_path: The path of the list item element, below the root.
    @ivar record_type: Called with the collected fields as keyword arguments
        when an item closes.
    @ivar fields: A C{dict} mapping the names of the item's child elements to
        L{Field}s.
    """

    def __init__(self, item_path, record_type, fields):
        self.item_path = tuple(item_path)
        self.record_type = record_type
        self.fields = fields

    def reset(self):
        self._result = []
        self._record = None

    def tag_start(self, name, attributes, path):
        if _below_root(path) == self.item_path:
            self._record = {}

    def tag_end(self, name, text, path):
        relative = _below_root(path)
        if relative == self.item_path:
            self._result.append(self.record_type(**self._record))
            self._record = None
        elif relative[:-1] == self.item_path and name in self.fields:
            field = self.fields[name]
            self._record[field.attribute] = field.convert(text)

    def result(self):
        return self._result


@implementer(IResponseDecoder)
class ScalarDecoder(object):
    """
    Decode the text of one element directly below the root; if the element
    repeats, the last one wins.
    """

    def __init__(self, name):
        self.name = name

    def reset(self):
        self._result = None

    def tag_start(self, name, attributes, path):
        pass

    def tag_end(self, name, text, path):
        if name == self.name and len(path) == 2:
            self._result = text

    def result(self):
        return self._result


@implementer(IResponseDecoder)
class ScalarListDecoder(object):
    """
    Decode the text of every element at C{path} below the root, in document
    order.
    """

    def __init__(self, path):
        self.path = tuple(path)

    def reset(self):
        self._result = []

    def tag_start(self, name, attributes, path):
        pass

    def tag_end(self, name, text, path):
        if _below_root(path) == self.path:
            self._result.append(text)

    def result(self):
        return self._result


class Scope(Names):
    """
    The innermost record being built by L{SecurityGroupsDecoder}.
    """
    NONE = NamedConstant()
    GROUP = NamedConstant()
    PERMISSION = NamedConstant()
    GROUP_REF = NamedConstant()


_GROUP = ("securityGroupInfo", "item")
_PERMISSION = _GROUP + ("ipPermissions", "item")
_GROUP_REF = _PERMISSION + ("groups", "item")
_IP_RANGE = _PERMISSION + ("ipRanges", "item")

# The scope each list item opens, and the scope it must be nested in.
_ITEM_SCOPES = {
    _GROUP: (Scope.GROUP, Scope.NONE),
    _PERMISSION: (Scope.PERMISSION, Scope.GROUP),
    _GROUP_REF: (Scope.GROUP_REF, Scope.PERMISSION),
}

# The scope owning each field, and the key the field is stored under.
_FIELDS = {
    _GROUP + ("ownerId",): (Scope.GROUP, "aws_owner"),
    _GROUP + ("groupName",): (Scope.GROUP, "aws_group_name"),
    _GROUP + ("groupDescription",): (Scope.GROUP, "aws_description"),
    _PERMISSION + ("ipProtocol",): (Scope.PERMISSION, "protocol"),
    _PERMISSION + ("fromPort",): (Scope.PERMISSION, "from_port"),
    _PERMISSION + ("toPort",): (Scope.PERMISSION, "to_port"),
    _IP_RANGE + ("cidrIp",): (Scope.PERMISSION, "cidr_ips"),
    _GROUP_REF + ("userId",): (Scope.GROUP_REF, "owner"),
    _GROUP_REF + ("groupName",): (Scope.GROUP_REF, "group"),
}


def _unique(items):
    """
    Remove exact duplicates from C{items}, keeping the first occurrence.
    """
    result = []
    for item in items:
        if item not in result:
            result.append(item)
    return result


@implementer(IResponseDecoder)
class SecurityGroupsDecoder(object):
    """
    Decode a C{DescribeSecurityGroups} response into a C{list} of
    L{model.SecurityGroup}s.

    A group holds permissions and a permission holds references to other
    groups, all in elements named C{item}.  The decoder keeps one slot per
    level and a stack of the open L{Scope}s; an item can only open inside
    its parent's scope and only close while it is the innermost scope.
    """

    def reset(self):
        self._result = []
        self._scopes = [Scope.NONE]
        self._group = None
        self._permission = None
        self._group_ref = None

    def _enter(self, scope, parent):
        if self._scopes[-1] is not parent:
            raise MalformedResponseError(
                "Cannot open %s inside %s" % (
                    scope.name, self._scopes[-1].name))
        self._scopes.append(scope)
        if scope is Scope.GROUP:
            self._group = {"permissions": []}
        elif scope is Scope.PERMISSION:
            self._permission = {"groups": [], "ip_ranges": []}
        else:
            self._group_ref = {}

    def _leave(self, scope):
        if self._scopes[-1] is not scope:
            raise MalformedResponseError(
                "Cannot close %s while %s is open" % (
                    scope.name, self._scopes[-1].name))
        self._scopes.pop()
        if scope is Scope.GROUP_REF:
            self._permission["groups"].append(
                model.GroupPermission(**self._group_ref))
            self._group_ref = None
        elif scope is Scope.PERMISSION:
            self._group["permissions"].append(self._permission)
            self._permission = None
        else:
            self._result.append(self._finish_group(self._group))
            self._group = None

    def _finish_group(self, group):
        perms = []
        for permission in group.pop("permissions"):
            perms.extend(permission["groups"])
            for cidr_ip in permission["ip_ranges"]:
                perms.append(model.IPPermission(
                    protocol=permission.get("protocol"),
                    from_port=permission.get("from_port"),
                    to_port=permission.get("to_port"),
                    cidr_ips=cidr_ip))
        return model.SecurityGroup(aws_perms=_unique(perms), **group)

    def _store(self, scope, key, text):
        if self._scopes[-1] is not scope:
            raise MalformedResponseError(
                "Field %s outside of %s" % (key, scope.name))
        if scope is Scope.GROUP:
            self._group[key] = text
        elif scope is Scope.GROUP_REF:
            self._group_ref[key] = text
        elif key == "cidr_ips":
            self._permission["ip_ranges"].append(text)
        else:
            self._permission[key] = text

    def tag_start(self, name, attributes, path):
        if name == "item":
            scopes = _ITEM_SCOPES.get(_below_root(path))
            if scopes is not None:
                self._enter(*scopes)

    def tag_end(self, name, text, path):
        relative = _below_root(path)
        if name == "item":
            scopes = _ITEM_SCOPES.get(relative)
            if scopes is not None:
                self._leave(scopes[0])
        elif relative in _FIELDS:
            scope, key = _FIELDS[relative]
            self._store(scope, key, text)

    def result(self):
        if self._scopes != [Scope.NONE]:
            raise MalformedResponseError("Document ended inside a group.")
        return self._result


@implementer(IResponseDecoder)
class ErrorDecoder(object):
    """
    Decode a provider error document.

    Two layouts are understood: C{Response/Errors/Error} elements with a
    C{RequestID} sibling of C{Errors}, and a single C{Error} root element.
    The result is a C{dict} with C{errors}, C{request_id} and C{host_id}
    keys.
    """

    def reset(self):
        self._errors = []
        self._error = None
        self._request_id = ""
        self._host_id = ""

    def _is_error(self, path):
        return path == ("Error",) or _below_root(path) == ("Errors", "Error")

    def tag_start(self, name, attributes, path):
        if self._is_error(path):
            self._error = {}

    def tag_end(self, name, text, path):
        if self._is_error(path):
            if self._error:
                self._errors.append(self._error)
            self._error = None
        elif name in ("RequestID", "RequestId") and len(path) == 2:
            self._request_id = text
        elif name in ("HostID", "HostId") and len(path) == 2:
            self._host_id = text
        elif self._error is not None and self._is_error(path[:-1]):
            if text:
                self._error[name] = text

    def result(self):
        return {
            "errors": self._errors,
            "request_id": self._request_id,
            "host_id": self._host_id,
        }


def truth_decoder():
    return TruthDecoder()


def describe_security_groups_decoder():
    return SecurityGroupsDecoder()


def describe_key_pairs_decoder():
    return RecordListDecoder(
        ("keySet", "item"), model.Keypair, {
            "keyName": Field("aws_key_name"),
            "keyFingerprint": Field("aws_fingerprint"),
        })


def create_key_pair_decoder():
    return RecordDecoder(
        model.Keypair, {
            "keyName": Field("aws_key_name"),
            "keyFingerprint": Field("aws_fingerprint"),
            "keyMaterial": Field("aws_material", optional=True),
        })


def describe_addresses_decoder():
    return RecordListDecoder(
        ("addressesSet", "item"), model.Address, {
            "publicIp": Field("public_ip"),
            "instanceId": Field("instance_id", optional=True),
        })


def allocate_address_decoder():
    return ScalarDecoder("publicIp")


def describe_availability_zones_decoder():
    return RecordListDecoder(
        ("availabilityZoneInfo", "item"), model.AvailabilityZone, {
            "zoneName": Field("zone_name"),
            "zoneState": Field("zone_state"),
            "regionName": Field("region_name", optional=True),
        })


def describe_regions_decoder():
    return ScalarListDecoder(("regionInfo", "item", "regionName"))


def error_decoder():
    return ErrorDecoder()
