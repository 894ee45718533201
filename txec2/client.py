# Copyright (C) 2009 Robert Collins <robertc@robertcollins.net>
# Copyright (C) 2009 Canonical Ltd
# Copyright (C) 2009 Duncan McGreggor <oubiwann@adytum.us>
# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

"""EC2 client support."""

from functools import partial

from txec2 import decoders
from txec2.benchmark import Benchmark
from txec2.cache import ResponseCache
from txec2.parser import parse
from txec2.query import Query
from txec2.service import EC2ServiceEndpoint


__all__ = ["EC2Client"]


def _numbered(name, values):
    """
    Expand a list argument into C{Name.1}, C{Name.2}, ... parameters.
    """
    return dict(("%s.%d" % (name, i + 1), value)
                for i, value in enumerate(values))


class EC2Client(object):
    """A client for EC2.

    The client owns its response cache and its benchmark timers; several
    clients in one process share nothing.

    @param endpoint: The L{EC2ServiceEndpoint} to talk to.
    @param query_factory: Called with C{action}, C{endpoint} and
        C{other_params} keyword arguments to build a query object with a
        C{submit} method.  Defaults to L{Query}.
    @param signer: An L{ISigner} provider for the default query factory.
    @param agent: The agent for the default query factory.
    @param reactor: The reactor for the default query factory.
    @param cache: If C{True}, calls describing a whole collection skip
        decoding when the response has not changed since the previous call.
    @param benchmark: A L{Benchmark} to record timings in.
    """
    def __init__(self, endpoint=None, query_factory=None, signer=None,
                 agent=None, reactor=None, cache=False, benchmark=None):
        if endpoint is None:
            endpoint = EC2ServiceEndpoint()
        if query_factory is None:
            query_factory = partial(
                Query, signer=signer, agent=agent, reactor=reactor)
        if benchmark is None:
            benchmark = Benchmark()
        self.endpoint = endpoint
        self.query_factory = query_factory
        self.caching = cache
        self.cache = ResponseCache()
        self.benchmark = benchmark

    def _submit(self, action, params, decoder_factory, cacheable=False):
        query = self.query_factory(
            action=action, endpoint=self.endpoint, other_params=params)
        started = self.benchmark.service.start()
        d = query.submit()

        def finished(result):
            self.benchmark.service.stop(started)
            return result

        d.addBoth(finished)
        d.addCallback(self._decode, action, decoder_factory, cacheable)
        return d

    def _decode(self, body, action, decoder_factory, cacheable):
        def decode(body):
            return self.benchmark.xml.measure(parse, body, decoder_factory())
        return self.cache.fetch(
            action, self.caching and cacheable, body, decode)

    def describe_security_groups(self, *names):
        """Describe security groups.

        @param names: Optionally, a list of security group names to describe.
            Defaults to all security groups in the account.
        @return: A C{Deferred} that will fire with a list of L{SecurityGroup}s
            retrieved from the cloud.
        """
        return self._submit(
            "DescribeSecurityGroups", _numbered("GroupName", names),
            decoders.describe_security_groups_decoder, cacheable=not names)

    def create_security_group(self, name, description):
        """Create security group.

        @param name: Name of the new security group.
        @param description: Description of the new security group.
        @return: A C{Deferred} that will fire with a truth value for the
            success of the operation.
        """
        # The service rejects an empty description.
        if not description:
            description = " "
        return self._submit(
            "CreateSecurityGroup",
            {"GroupName": name, "GroupDescription": description},
            decoders.truth_decoder)

    def delete_security_group(self, name):
        return self._submit(
            "DeleteSecurityGroup", {"GroupName": name},
            decoders.truth_decoder)

    def _group_parameters(self, name, owner, group):
        return {
            "GroupName": name,
            "SourceSecurityGroupName": group,
            "SourceSecurityGroupOwnerId": str(owner).replace("-", ""),
        }

    def _ip_parameters(self, name, from_port, to_port, protocol, cidr_ip):
        return {
            "GroupName": name,
            "IpProtocol": protocol,
            "FromPort": str(from_port),
            "ToPort": str(to_port),
            "CidrIp": cidr_ip,
        }

    def authorize_group_permission(self, name, owner, group):
        """
        Allow the members of another account's security group to connect to
        the members of security group C{name}.

        @param owner: The account id owning C{group}; dashes are ignored.
        @return: A C{Deferred} firing with a truth value.
        """
        return self._submit(
            "AuthorizeSecurityGroupIngress",
            self._group_parameters(name, owner, group),
            decoders.truth_decoder)

    def revoke_group_permission(self, name, owner, group):
        """
        Undo L{authorize_group_permission}.
        """
        return self._submit(
            "RevokeSecurityGroupIngress",
            self._group_parameters(name, owner, group),
            decoders.truth_decoder)

    def authorize_ip_permission(self, name, from_port, to_port,
                                protocol="tcp", cidr_ip="0.0.0.0/0"):
        """
        Allow connections from C{cidr_ip} to a port range of the members of
        security group C{name}.

        @param protocol: One of C{"tcp"}, C{"udp"} or C{"icmp"}.  For ICMP
            the ports are the ICMP type and code, C{-1} meaning all.
        @return: A C{Deferred} firing with a truth value.
        """
        return self._submit(
            "AuthorizeSecurityGroupIngress",
            self._ip_parameters(name, from_port, to_port, protocol, cidr_ip),
            decoders.truth_decoder)

    def revoke_ip_permission(self, name, from_port, to_port,
                             protocol="tcp", cidr_ip="0.0.0.0/0"):
        return self._submit(
            "RevokeSecurityGroupIngress",
            self._ip_parameters(name, from_port, to_port, protocol, cidr_ip),
            decoders.truth_decoder)

    def describe_key_pairs(self, *names):
        """Returns information about key pairs available."""
        return self._submit(
            "DescribeKeyPairs", _numbered("KeyName", names),
            decoders.describe_key_pairs_decoder, cacheable=not names)

    def create_key_pair(self, name):
        """
        Create a new key pair.

        @return: A C{Deferred} firing with a L{Keypair} which includes the
            private key material.
        """
        return self._submit(
            "CreateKeyPair", {"KeyName": name},
            decoders.create_key_pair_decoder)

    def delete_key_pair(self, name):
        """Delete a given key pair."""
        return self._submit(
            "DeleteKeyPair", {"KeyName": name}, decoders.truth_decoder)

    def allocate_address(self):
        """
        Acquire an elastic IP address to be attached subsequently to EC2
        instances.

        @return: the IP address allocated.
        """
        return self._submit(
            "AllocateAddress", {}, decoders.allocate_address_decoder)

    def associate_address(self, instance_id, public_ip):
        """
        Associate an allocated C{public_ip} with the instance identified by
        C{instance_id}.

        @return: C{True} if the operation succeeded.
        """
        return self._submit(
            "AssociateAddress",
            {"InstanceId": instance_id, "PublicIp": public_ip},
            decoders.truth_decoder)

    def describe_addresses(self, *public_ips):
        """
        List the elastic IPs allocated in this account.

        @param public_ips: if specified, the addresses to get information
            about.

        @return: a C{list} of L{Address}.  If the elastic IP is not
            associated currently, C{instance_id} will be C{None}.
        """
        return self._submit(
            "DescribeAddresses", _numbered("PublicIp", public_ips),
            decoders.describe_addresses_decoder, cacheable=not public_ips)

    def disassociate_address(self, public_ip):
        """
        Disassociate an address previously associated with
        C{associate_address}. This is an idempotent operation, so it can be
        called several times without error.
        """
        return self._submit(
            "DisassociateAddress", {"PublicIp": public_ip},
            decoders.truth_decoder)

    def release_address(self, public_ip):
        """
        Release a previously allocated address returned by C{allocate_address}.

        @return: C{True} if the operation succeeded.
        """
        return self._submit(
            "ReleaseAddress", {"PublicIp": public_ip},
            decoders.truth_decoder)

    def describe_availability_zones(self, *names):
        return self._submit(
            "DescribeAvailabilityZones", _numbered("ZoneName", names),
            decoders.describe_availability_zones_decoder,
            cacheable=not names)

    def describe_regions(self, *names):
        """
        @return: A C{Deferred} firing with a C{list} of region names.
        """
        return self._submit(
            "DescribeRegions", _numbered("RegionName", names),
            decoders.describe_regions_decoder, cacheable=not names)
