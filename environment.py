"""
Monkey runtime environments
A scope is a dict of bindings plus a link to its enclosing scope.
Closures hold a reference to the scope they were defined in, so a scope
lives as long as any call frame or closure refers to it.
"""

from typing import Dict, Optional


def make_runtime_env(parent: Optional[Dict] = None, bindings: Optional[Dict] = None) -> Dict:
  """Create a runtime environment"""
  return {
      'parent': parent,
      'bindings': dict(bindings) if bindings else {}
  }


def env_enclose(outer: Dict) -> Dict:
  """Create an empty scope whose outer link is the given environment"""
  return make_runtime_env(parent=outer)


def env_lookup_value(env: Dict, name: str) -> Optional[Dict]:
  """Look up a value in the environment chain, innermost scope first"""
  if name in env['bindings']:
    return env['bindings'][name]
  elif env['parent']:
    return env_lookup_value(env['parent'], name)
  return None


def env_set_value(env: Dict, name: str, value: Dict) -> Dict:
  """Bind name in the innermost scope only and return the value"""
  env['bindings'][name] = value
  return value


def env_user_bindings(env: Dict) -> Dict[str, Dict]:
  """All names visible from env, inner bindings shadowing outer ones"""
  chain = []
  scope = env
  while scope is not None:
    chain.append(scope)
    scope = scope['parent']

  visible: Dict[str, Dict] = {}
  for scope in reversed(chain):
    visible.update(scope['bindings'])
  return visible
