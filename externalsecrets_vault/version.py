"""ExternalSecrets Vault Meta information.
   Vault backend resolving ExternalSecret manifests through Kubernetes auth.
"""
__title__ = 'externalsecrets_vault'
__description__ = (
   'Vault backend that resolves ExternalSecret manifests '
   'using Kubernetes service-account authentication.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
