"""
Radar — MRMS reflectivity snapshot service

- Scans the MRMS ReflectivityAtLowestAltitude directory for the newest grid file
- Downloads + gunzips it, decodes the GRIB2 grid, subsamples to (lat, lon, dBZ) points
- Caches the snapshot in memory with a TTL; falls back to synthetic storms on any source failure
- Serves /api/radar/latest and /api/health (see radar.server)
"""
