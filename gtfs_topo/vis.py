# Visualization tools, mostly useful for debugging

import itertools as it, operator as op, functools as ft
import contextlib

from . import utils as u, types as t


print_fmt = lambda tpl, *a, file=None, end='\n', **k:\
	print(tpl.format(*a,**k), file=file, end=end)

dot_str = lambda n: '"{}"'.format(n.replace('"', '\\"'))
dot_html = lambda n: '<{}>'.format(n)

class_node_opts = dict(
	core=dict(shape='box', style='bold'),
	passenger=dict(shape='ellipse'),
	tail=dict(shape='ellipse', style='dashed', color='gray') )


@contextlib.contextmanager
def dot_graph(dst, dot_opts, indent=2):
	print_fmt('digraph {{', file=dst)
	if isinstance(indent, int): indent = ' '*indent
	p = lambda tpl, *a, end='\n', **k:\
		print_fmt(indent + tpl, *a, file=dst, end=end, **k)
	p('### Defaults')
	for t, opts in (dot_opts or dict()).items():
		p('{} [ {} ]'.format(t, ', '.join('{}={}'.format(k, v) for k, v in opts.items())))
	yield p
	print_fmt('}}', file=dst)


def dot_for_route_profile(profile, dst, dot_opts=None, edge_min=0):
	'''Dump station graph of RouteProfile, with station classes as node styles,
		and edge frequencies as labels, skipping edges with frequency below edge_min.'''
	dot_opts = dot_opts or dict()
	dot_opts.setdefault('graph', dict()).setdefault('rankdir', 'LR')
	node_name = lambda key: 'station-{}'.format(key)
	core = set(profile.core)

	with dot_graph(dst, dot_opts) as p:

		p('')
		p('### Stations')
		for key, station in profile.stations.items():
			cls = profile.classes.get(key, t.internal.StationClass.passenger)
			label = '<b>{}</b><br/>{} [{}]'.format(station.name, cls.value, key)
			if key in profile.boundary:
				label += '<br/>boundary={:.2f}'.format(profile.boundary[key])
			opts = ''.join( ', {}={}'.format(k, v)
				for k, v in sorted(class_node_opts[cls.value].items()) )
			p('{} [label={}{}]', dot_str(node_name(key)), dot_html(label), opts)

		p('')
		p('### Edges')
		for (a, b), freq in sorted(profile.edges.items()):
			if freq < edge_min: continue
			style = ', style=bold' if a in core and b in core else ''
			p( '{} -> {} [label="{:.0f}%"{}]',
				dot_str(node_name(a)), dot_str(node_name(b)), freq * 100, style )
