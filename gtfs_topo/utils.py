import itertools as it, operator as op, functools as ft
import os, logging, math
import contextlib, tempfile, stat

import attr


class LogMessage:
	def __init__(self, fmt, a, k): self.fmt, self.a, self.k = fmt, a, k
	def __str__(self): return self.fmt.format(*self.a, **self.k) if self.a or self.k else self.fmt

class LogStyleAdapter(logging.LoggerAdapter):
	def __init__(self, logger, extra=None):
		super(LogStyleAdapter, self).__init__(logger, extra or {})
	def log(self, level, msg, *args, **kws):
		if not self.isEnabledFor(level): return
		log_kws = {} if 'exc_info' not in kws else dict(exc_info=kws.pop('exc_info'))
		msg, kws = self.process(msg, kws)
		self.logger._log(level, LogMessage(msg, args, kws), (), log_kws)

get_logger = lambda name: LogStyleAdapter(logging.getLogger(name))


def attr_struct(cls=None, vals_to_attrs=False, defaults=..., **kws):
	if not cls:
		return ft.partial( attr_struct,
			vals_to_attrs=vals_to_attrs, defaults=defaults, **kws )
	try:
		keys = cls.keys
		del cls.keys
	except AttributeError: keys = list()
	else:
		attr_kws = dict()
		if defaults is not ...: attr_kws['default'] = defaults
		if isinstance(keys, str): keys = keys.split()
		for k in keys: setattr(cls, k, attr.ib(**attr_kws))
	if vals_to_attrs:
		for k, v in list(vars(cls).items()):
			if k.startswith('_') or k in keys or callable(v): continue
			setattr(cls, k, attr.ib(v))
	kws.setdefault('hash', not hasattr(cls, '__hash__'))
	kws.setdefault('slots', True)
	return attr.s(cls, **kws)

def attr_init(factory_or_default=attr.NOTHING, **attr_kws):
	if callable(factory_or_default): factory_or_default = attr.Factory(factory_or_default)
	return attr.ib(default=factory_or_default, **attr_kws)

def conf_update(conf, values, path=None):
	'''Update attrs-based conf object in-place from (nested) mapping.
		Raises ValueError for keys that conf does not have.'''
	for k, v in values.items():
		k_path = '{}.{}'.format(path, k) if path else k
		if not hasattr(conf, k):
			raise ValueError('Unrecognized conf option: {!r} (value: {!r})'.format(k_path, v))
		if isinstance(v, dict) and attr.has(type(getattr(conf, k))):
			conf_update(getattr(conf, k), v, k_path)
		else: setattr(conf, k, v)
	return conf


p = ft.partial(print, flush=True)

def coroutine(func):
	@ft.wraps(func)
	def cr_wrapper(*args, **kws):
		cr = func(*args, **kws)
		next(cr)
		return cr
	return cr_wrapper

inf = float('inf')
nan = float('nan')

def max(iterable, default=..., _max=max, **kws):
	try: return _max(iterable, **kws)
	except ValueError:
		if default is ...: raise
		return default

def min(iterable, default=..., _min=min, **kws):
	try: return _min(iterable, **kws)
	except ValueError:
		if default is ...: raise
		return default

def is_nan(v): return v is None or (isinstance(v, float) and math.isnan(v))


@contextlib.contextmanager
def safe_replacement(path, *open_args, mode=None, **open_kws):
	path = str(path)
	if mode is None:
		try: mode = stat.S_IMODE(os.lstat(path).st_mode)
		except OSError: pass
	open_kws.update( delete=False,
		dir=os.path.dirname(path) or '.', prefix=os.path.basename(path)+'.' )
	if not open_args: open_kws['mode'] = 'w'
	with tempfile.NamedTemporaryFile(*open_args, **open_kws) as tmp:
		try:
			if mode is not None: os.fchmod(tmp.fileno(), mode)
			yield tmp
			if not tmp.closed: tmp.flush()
			os.rename(tmp.name, path)
		finally:
			try: os.unlink(tmp.name)
			except OSError: pass


def time_parse(time_str):
	'''Parse GTFS "HH:MM[:SS]" time into float minutes since service-day midnight.
		Hours can go past 24. Returns None for empty values.'''
	time_str = (time_str or '').strip()
	if not time_str: return
	if ':' not in time_str: return float(time_str)
	vals = time_str.split(':')
	if len(vals) == 2: vals.append('00')
	assert len(vals) == 3, vals
	return sum(int(n)*k for k, n in zip([60, 1, 1/60], vals))

def time_format(minutes):
	if minutes is None: return '-'
	minutes = int(round(minutes))
	return '{:02d}:{:02d}'.format(*divmod(minutes, 60))

def date_str(date):
	'Normalize datetime.date or YYYYMMDD/YYYY-MM-DD string to YYYYMMDD.'
	if date is None: return
	if hasattr(date, 'strftime'): return date.strftime('%Y%m%d')
	return str(date).strip().replace('-', '')
