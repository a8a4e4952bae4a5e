"""Browser module - CDP session factory and network event feed"""
from .cdp_session import BrowserSession, CDPChannel, CDPSessionFactory
from .network_feed import CDPNetworkFeed

__all__ = ['BrowserSession', 'CDPChannel', 'CDPSessionFactory', 'CDPNetworkFeed']
