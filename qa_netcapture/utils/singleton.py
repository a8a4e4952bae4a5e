"""
Singleton decorator utility

Thread-safe variant: the session registry is reached from several test
threads at once, so the first construction is guarded by a lock.
"""
import threading


def singleton(cls):
	"""
	Singleton decorator that ensures only one instance of a class exists

	Args:
		cls: The class (or zero-argument factory) to make a singleton

	Returns:
		Wrapper function that returns the singleton instance
	"""
	instance = [None]
	lock = threading.Lock()

	def wrapper(*args, **kwargs):
		if instance[0] is None:
			with lock:
				if instance[0] is None:
					instance[0] = cls(*args, **kwargs)
		return instance[0]

	wrapper.__wrapped__ = cls
	return wrapper
