## foundational vector and point helpers for polysolid
## Copyright (c) 2025 polysolid contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""foundational vector geometry for **polysolid**

====================
OVERVIEW
====================

The polysolid.geom module provides the scalar, vector and point
operations that the rest of **polysolid** is built on.

constants
=========

polysolid.geom provides the "constant" ``epsilon``, the coordinate
tolerance used for every coincidence test in the package.  Two
positions closer than ``epsilon`` are the same position.  Redefine it
at your peril.

vectors
=======

vectors are defined as a list of four numbers, i.e. ``[x,y,z,w]``.
The w coordinate is a homogeneous normalization factor, so the same
list representation can be pushed through 4x4 transformation
matrices (see ``polysolid.xform``).  Most operations in this module
ignore w and treat the vector as living in the w=1 hyperplane.

points
======

Any vector with ``w > 0`` is a valid point.  ``point()`` builds one
from scalars or copies an existing point, and enforces ``w > 0``. ::

   pnt1 = point(0,0)
   pnt2 = point(2.0,-2.0,5.0)
   pnt3 = vect(0,0,0,1)

directions
==========

Ray and normal directions are plain vectors.  The predicates
``parallel()``, ``samedirection()`` and ``perpendicular()`` compare
directions independent of their magnitude.
"""

from math import *
import copy

## constants
epsilon=0.000005
pi2 = 2.0*pi

## operations on scalars
## -----------------------

## utility function to determine if argument is a "real" python
## number, since booleans are considered ints (True=1 and False=0 for
## integer arithmetic) but 1 and 0 are not considered boolean

def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n,bool)) and isinstance(n,(int,float))

## utilty function to determine if scalars a and b are the same to
## within epsilon
def close(a,b):
    """ are two scalars the same within epsilon
    """
    return abs(a-b) < epsilon


## operations on vectors
## ------------------------

def vect(a=False,b=False,c=False,d=False):
    """Convenience function for making a homogeneous coordinates 4 vector
from practically anything
    """
    r = [0,0,0,1]
    if isgoodnum(a):
        r[0]=a
        if isgoodnum(b):
            r[1]=b
            if isgoodnum(c):
                r[2]=c
                if isgoodnum(d):
                    r[3]=d
    elif isinstance(a,(tuple,list)):
        for i in range(min(4,len(a))):
            x=a[i]
            if isgoodnum(x):
                r[i]=x
    return r

## determine if two vectors are the same, to within epsilon
def vclose(a,b):
    return close(mag(sub(a,b)),0)

## check to see if argument is a proper vector for our purposes
def isvect(x):
    """
    check to see if argument is a proper vector for our purposes
    """
    return isinstance(x,list) and len(x) == 4 and isgoodnum(x[0]) and isgoodnum(x[1]) and isgoodnum(x[2]) and isgoodnum(x[3])

## R^3 -> R^3 functions: ignore w component
## ------------------------------------------------
def add(a,b):
    """ 3 vector, `a + b`"""
    return [a[0]+b[0],a[1]+b[1],a[2]+b[2],1.0]

def sub(a,b):
    """ 3 vector, `a - b`"""
    return [a[0]-b[0],a[1]-b[1],a[2]-b[2],1.0]

def scale3(a,c):
    """ 3 vector, vector ''a'' times scalar ``c``, `a * c`"""
    return [a[0]*c,a[1]*c,a[2]*c,1.0]

## Compute the cross generalized product of a x b, assuming that both
## fall into the w=1 hyperplane
def cross(a,b):
    """Compute the cross generalized product of a x b, assuming that both
    fall into the w=1 hyperplane

    """

    return [ a[1]*b[2] - a[2]*b[1],
             a[2]*b[0] - a[0]*b[2],
             a[0]*b[1] - a[1]*b[0],
             1.0 ]

## R^4 -> R^4 functions: operate on w component
def scale4(a,c):
    """ 4 vector ``a`` times scalar ``c``"""
    return [a[0]*c,a[1]*c,a[2]*c,a[3]*c]

## Homogenize, or project back to the w=1 plane by scaling all values
## by w
def homo(a):
    """Homogenize, or project back to the w=1 plane by scaling all values by w"""
    return [ a[0]/a[3],
             a[1]/a[3],
             a[2]/a[3],
             1 ]

## R^3 -> R functions -- ignore w component
## ----------------------------------------
def dot(a,b):
    """ 3 vector ``a`` dot ``b`` """
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]

def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(a[0]*a[0]+a[1]*a[1]+a[2]*a[2])

def dist(a,b):  # compute distance between two points a & b
    """ compute the euclidean distance between two 3 vector points ``a`` and ``b``"""
    return mag(sub(a,b))

## R^4 -> R functions
## ----------------------------------------
def dot4(a,b):
    """ 4 vect dot product"""
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]+a[3]*b[3]

## direction operations
## --------------------

def normalize(a):
    """return the unit length version of 3 vector ``a``"""
    m = mag(a)
    if m < epsilon:
        raise ValueError('zero-length vector passed to normalize: {}'.format(a))
    return [a[0]/m,a[1]/m,a[2]/m,1.0]

def parallel(a,b):
    """are directions ``a`` and ``b`` parallel (either sense)?"""
    ma = mag(a)
    mb = mag(b)
    if ma < epsilon or mb < epsilon:
        return False
    return mag(cross(a,b)) / (ma*mb) < epsilon

def samedirection(a,b):
    """are directions ``a`` and ``b`` parallel and pointing the same way?"""
    return parallel(a,b) and dot(a,b) > 0.0

def perpendicular(a,b):
    """are directions ``a`` and ``b`` at right angles?"""
    ma = mag(a)
    mb = mag(b)
    if ma < epsilon or mb < epsilon:
        return False
    return abs(dot(a,b)) / (ma*mb) < epsilon

def linear_combination(wa,a,wb,b):
    """ weighted combination of two points, `wa*a + wb*b`"""
    return [wa*a[0]+wb*b[0],
            wa*a[1]+wb*b[1],
            wa*a[2]+wb*b[2],
            1.0]


## misc operations
## -----------------------------------------

deepcopy = copy.deepcopy

# pretty printing string formatter for vectors.  You can use this
# anywhere you use str(), since it will fall back to str() if the
# argument isn't a polysolid vector or list of vectors.
def vstr(a):
    """ utility function for formatting vectors and lists of vectors
    """
    if not isinstance(a,list):
        return str(a)
    if isvect(a):
        if abs(a[3]-1.0) > epsilon: # not in w=1
            return "[{}, {}, {}, {}]".format(a[0],a[1],a[2],a[3])
        return "[{}, {}, {}]".format(a[0],a[1],a[2])
    if a and all(isvect(x) for x in a):
        return "[" + ", ".join(vstr(x) for x in a) + "]"
    return str(a)


## COMPUTATIONAL GEOMETRY
## ======================
## operations on points
## --------------------

## points are defined as vectors that lie in a positive, non-zero
## hyperplane, i.e. [x, y, z, w] such that w > 0.

def point(x=False,y=False,z=False,w=False):
    """Point creation from point or scalars"""
    if ispoint(x):
        return deepcopy(x)
    if isinstance(x,(tuple,list)) and len(x) in (3,4) and \
       all(isgoodnum(c) for c in x):
        r = vect(x)
    else:
        r = [0,0,0,1]
        if isgoodnum(x):
            r[0]=x
            if isgoodnum(y):
                r[1]=y
                if isgoodnum(z):
                    r[2]=z
                    if isgoodnum(w):
                        r[3]=w
    if r[3] > 0:
        return r
    else:
        raise ValueError('bad w argument to point()')


def ispoint(x):
    """ is it a point?"""
    if isvect(x) and x[3] > 0.0:
        return True
    return False

## center of a list of points, which is just the average position
def pointcenter(pts):
    """ arithmetic mean of a non-empty list of points"""
    if not pts:
        raise ValueError('empty point list passed to pointcenter')
    n = float(len(pts))
    return [sum(p[0] for p in pts)/n,
            sum(p[1] for p in pts)/n,
            sum(p[2] for p in pts)/n,
            1.0]

## membership test using coordinate equality to within epsilon
def pointin(p,pts):
    """ is point ``p`` the same as any point in ``pts``?"""
    return any(vclose(p,q) for q in pts)

## collapse points that are the same to within epsilon, preserving
## first-seen order
def uniquepoints(pts):
    """ remove duplicates (to within epsilon) from a list of points"""
    result = []
    for p in pts:
        if not pointin(p,result):
            result.append(p)
    return result

def pointbbox(pts):
    """ compute 3D bounding box of a list of points, padded by epsilon"""
    if not pts:
        raise ValueError('empty point list passed to pointbbox')
    ee = epsilon
    return [[min(p[0] for p in pts)-ee,
             min(p[1] for p in pts)-ee,
             min(p[2] for p in pts)-ee,1.0],
            [max(p[0] for p in pts)+ee,
             max(p[1] for p in pts)+ee,
             max(p[2] for p in pts)+ee,1.0]]

# does point p lie inside 3D bounding box bbox
def isinsidebbox(bbox,p):
    """ does point ``p`` lie inside 3D bounding box ``bbox``?"""
    return p[0] >= bbox[0][0] and p[0] <= bbox[1][0] and\
        p[1] >= bbox[0][1] and p[1] <= bbox[1][1] and\
        p[2] >= bbox[0][2] and p[2] <= bbox[1][2]

def bboxoverlap(a,b):
    """ do 3D bounding boxes ``a`` and ``b`` overlap (touching counts)?"""
    return not (a[1][0] < b[0][0] or a[0][0] > b[1][0] or
                a[1][1] < b[0][1] or a[0][1] > b[1][1] or
                a[1][2] < b[0][2] or a[0][2] > b[1][2])


## operations on line segments
## ---------------------------

## lines are lists of two points, parameterized over 0 <= u <= 1

def line(p1,p2):
    """ make a line segment from two points"""
    return [point(p1),point(p2)]

def sampleline(l,u):
    """ sample line ``l`` at parameter ``u``"""
    return linear_combination(1.0-u,l[0],u,l[1])

def unsampleline(l,p):
    """return the parameter of the projection of ``p`` onto the
    infinite line through ``l``"""
    d = sub(l[1],l[0])
    dd = dot(d,d)
    if dd < epsilon*epsilon:
        return 0.0
    return dot(sub(p,l[0]),d)/dd

def linepointdist(l,p):
    """ distance from point ``p`` to line segment ``l``"""
    u = max(0.0,min(1.0,unsampleline(l,p)))
    return dist(p,sampleline(l,u))

## is point p on the open interior of segment l, not touching either
## endpoint?
def isinsideline(l,p):
    """ does ``p`` lie on segment ``l`` strictly between its endpoints?"""
    if vclose(p,l[0]) or vclose(p,l[1]):
        return False
    u = unsampleline(l,p)
    if u <= 0.0 or u >= 1.0:
        return False
    return dist(p,sampleline(l,u)) < epsilon
