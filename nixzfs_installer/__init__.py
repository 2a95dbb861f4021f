"""NixOS on ZFS installer.

Partitions a disk, lays out an encrypted ZFS pool whose root dataset is
rolled back to a blank snapshot on every boot, renders configuration.nix
and hands off to nixos-install.
"""

__all__ = []
