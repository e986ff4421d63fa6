"""
Package des collecteurs spécifiques par plateforme

Ce package contient les collecteurs qui interrogent les sources brutes
propres à chaque système d'exploitation :
- macOS (system_profiler)
- Windows (reg query, driverquery, ver)
- Linux (os-release, dpkg-query ou rpm)
"""
