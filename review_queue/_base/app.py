"""
Process-wide server instance holder.

The bot serves exactly one FastAPI app per process. Factories built on
:class:`BaseServerFactory` create it once, hand it out afterwards and let
tests drop it between cases.
"""

from abc import ABCMeta, abstractmethod


class BaseServerFactory[T](metaclass=ABCMeta):
    """Create-once holder for a server object of type ``T``.

    Only the server object lives here. Queue state does not: the registry is
    owned by the engine that ``create_slack_app`` wires into the routes, so a
    reset never loses or shares queue entries.

    Examples
    --------
    .. code-block:: python

        from review_queue.webhook.app import web_factory

        app = web_factory.create(settings=settings)
        assert web_factory.get() is app

        # Between test cases
        web_factory.reset()
    """

    @staticmethod
    @abstractmethod
    def create(**kwargs) -> T:
        """Build the server; a second call before :meth:`reset` is an error.

        Parameters
        ----------
        **kwargs
            Factory specific options, e.g. ``settings`` for the web app
        """

    @staticmethod
    @abstractmethod
    def get() -> T:
        """Return the server built by :meth:`create`.

        Raises
        ------
        AssertionError
            If :meth:`create` has not been called yet
        """

    @staticmethod
    @abstractmethod
    def reset() -> None:
        """Forget the server so the next :meth:`create` builds a fresh one."""
