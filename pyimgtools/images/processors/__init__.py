"""
Overview
========

An image processor is a synchronous component that is run on a worker thread. It accepts one or more
``pyimgtools.images.Image`` objects and returns a new ``Image``. Each processor encapsulates a single,
well-defined operation, such as resizing, rotating, filtering or compositing, so that processors can be
combined into configurable pipelines. Processors never modify their input images.

Core Interface
==============

Single-image operations derive from ``ImageProcessor`` and implement ``process(image)``. Operations that combine
several images derive from ``CompositeProcessor`` and implement ``process(images)``. Awaiting a processor runs
``process`` in the default executor of the event loop; :class:`pyimgtools.tasks.ImageTask` runs it in a
dedicated thread pool and adds timing and encoding.

The Image Model
===============

The ``Image`` object bundles the pixel data and its layout:

- Pixel data: ``image.data`` is a C-contiguous NumPy array of shape (height, width, channels).
- Color space: ``image.color_space`` gives number and order of channels (GRAY, RGB, RGBA, BGR, BGRA).
- Sample type: ``image.sample_type`` is one of uint8, uint16 or float32.

Colors given to processors (padding, rotation and background colors) are always authored in RGB order and
converted to the channel order of the image they are applied to.

Categories
==========

- ``transform``: single-image geometry and kernel filters (Resize, Rotate, Crop, Padding, Filter) plus
  CropBoxes for cutting out object detections.
- ``mix``: composites of several images (Concat, Blend, Mosaic, AdvancedMosaic). All inputs are converted to a
  negotiated common color space first.

Configuration
=============

Processors are plain objects and can be created from dictionaries with a ``class`` key, e.g. in YAML:

.. code-block:: yaml

   - class: pyimgtools.images.processors.transform.Resize
     width: 640
     height_mode: auto
   - class: pyimgtools.images.processors.transform.Filter
     filter_type: sharpen

Errors
======

Invalid parameters raise ``InputError`` or ``ProcessingError``, low level errors from NumPy and SciPy are wrapped
into ``ProcessingError``. Recoverable conditions, like placements outside of a canvas, are handled locally and
logged.
"""
