#-*-coding: utf-8-*-
"""
OpenID 2.0 login flow for Relying Parties.

The package drives the two HTTP round trips of an OpenID login on behalf of a
web application: the login form submission that sends the browser to the
user's identity provider, and the callback where the provider's assertion is
verified and the requested profile attributes are handed back to the
application.

The protocol itself (discovery, associations, signature checks) is done by the
``python3-openid`` consumer library, see :mod:`openauth.consumer`.  The
application plugs in through :class:`openauth.host.Host` and configures the
flow with :class:`openauth.config.Config`::

    flow = AuthFlow(Config(login_url='/users/login'))
    outcome = flow.handle(request, host)

.. code-block:: none

    Licensed under the Apache License, Version 2.0 (the "License");
    you may not use this file except in compliance with the License.
    You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions
    and limitations under the License.
"""

version_info = (0, 1, 0)

__version__ = ".".join(str(x) for x in version_info)

__all__ = [
    'attributes',
    'config',
    'eaut',
    'errors',
    'fetchers',
    'flow',
    'host',
    'resolver',
    'results',
    'store',
    'urinorm',
    'xrds',
    'yadis',
]
